"""Board topology for the cross-and-circle track."""

from __future__ import annotations

from enum import Enum


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"


# Index in this tuple == seat index == turn order.
TURN_ORDER: tuple[Color, ...] = (Color.RED, Color.BLUE, Color.GREEN, Color.YELLOW)

PLAYER_COUNT = 4
PAWNS_PER_PLAYER = 4

TRACK_LENGTH = 52  # positions 0..51, circular
HOME_LANE_LENGTH = 5  # offsets 0..5, where 5 means the pawn has arrived
ENTRY_ROLL = 5  # minimum dice total to leave start

# fmt: off
START_OFFSETS: dict[Color, int] = {
    Color.RED:     4,
    Color.GREEN:  17,
    Color.YELLOW: 30,
    Color.BLUE:   43,
}

# Last track cell before the pawn peels into its home lane.
HOME_ENTRANCES: dict[Color, int] = {
    Color.RED:     3,
    Color.GREEN:  16,
    Color.YELLOW: 29,
    Color.BLUE:   42,
}
# fmt: on


def distance_to_home_entrance(color: Color, track_position: int) -> int:
    return (HOME_ENTRANCES[color] - track_position + TRACK_LENGTH) % TRACK_LENGTH
