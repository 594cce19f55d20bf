"""Game state snapshots: pawns, players and the aggregate GameState.

Every type here is frozen. Engine operations never mutate a snapshot; they
build the next one with ``dataclasses.replace`` so a caller can compare the
returned state to its input with ``==``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from parcheesi_bench.board import (
    HOME_LANE_LENGTH,
    PAWNS_PER_PLAYER,
    TURN_ORDER,
    Color,
)

INITIAL_LOG = "Game initialized. Waiting for players..."


class PawnStatus(str, Enum):
    START = "start"
    ON_TRACK = "on_track"
    IN_HOME_LANE = "in_home_lane"
    HOME = "home"


@dataclass(frozen=True)
class Pawn:
    """One pawn. Only the position field matching ``status`` is set."""

    id: str
    color: Color
    status: PawnStatus = PawnStatus.START
    track_position: int | None = None
    home_lane_offset: int | None = None

    def on_track(self, position: int) -> Pawn:
        return replace(
            self, status=PawnStatus.ON_TRACK,
            track_position=position, home_lane_offset=None,
        )

    def in_home_lane(self, offset: int) -> Pawn:
        return replace(
            self, status=PawnStatus.IN_HOME_LANE,
            track_position=None, home_lane_offset=offset,
        )

    def at_home(self) -> Pawn:
        return replace(
            self, status=PawnStatus.HOME,
            track_position=None, home_lane_offset=HOME_LANE_LENGTH,
        )


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    color: Color
    has_paid: bool = False  # set by the join flow, never read by the rules
    is_cpu: bool = True
    pawns: tuple[Pawn, ...] = ()

    @property
    def all_home(self) -> bool:
        return all(p.status is PawnStatus.HOME for p in self.pawns)


@dataclass(frozen=True)
class GameState:
    """Complete snapshot of one game."""

    players: tuple[Player, ...] = ()
    current_turn: int = 0
    dice: tuple[int, ...] = ()  # empty = not rolled yet this turn
    can_roll: bool = True
    selected_pawn_id: str | None = None
    winner: Color | None = None
    logs: tuple[str, ...] = field(default_factory=tuple)

    @property
    def active_player(self) -> Player:
        return self.players[self.current_turn]

    @property
    def dice_total(self) -> int:
        return sum(self.dice)

    def find_pawn(self, pawn_id: str) -> tuple[int, int] | None:
        """Return ``(player_index, pawn_index)`` for *pawn_id*, or None."""
        for player_idx, player in enumerate(self.players):
            for pawn_idx, pawn in enumerate(player.pawns):
                if pawn.id == pawn_id:
                    return player_idx, pawn_idx
        return None

    def with_log(self, message: str, **changes) -> GameState:
        return replace(self, logs=self.logs + (message,), **changes)


def _make_pawns(color: Color) -> tuple[Pawn, ...]:
    return tuple(Pawn(id=f"{color.value}-{i}", color=color) for i in range(PAWNS_PER_PLAYER))


def initialize(human_name: str | None = None) -> GameState:
    """Seat one human (index 0) and three CPU players, all pawns in start."""
    players = []
    for index, color in enumerate(TURN_ORDER):
        is_cpu = index != 0
        if is_cpu:
            name = f"CPU {color.value}"
        else:
            name = human_name or f"Player {color.value}"
        players.append(Player(
            id=f"player-{index}",
            name=name,
            color=color,
            is_cpu=is_cpu,
            pawns=_make_pawns(color),
        ))

    return GameState(players=tuple(players), logs=(INITIAL_LOG,))


def seat_human(state: GameState, name: str, has_paid: bool = True) -> GameState:
    """Record the human player's name and payment flag after joining."""
    players = list(state.players)
    players[0] = replace(players[0], name=name, has_paid=has_paid)
    return replace(state, players=tuple(players))


def select_pawn(state: GameState, pawn_id: str | None) -> GameState:
    return replace(state, selected_pawn_id=pawn_id)
