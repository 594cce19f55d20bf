"""Rules engine: pure GameState -> GameState transitions.

None of these functions raise for well-typed input. An action that is not
allowed (rolling twice, moving an unknown pawn, an illegal move) returns
the input state unchanged. Callers who need to know *why* nothing happened
can use the ``try_*`` wrappers, which return an ActionResult.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Protocol

from parcheesi_bench.board import (
    ENTRY_ROLL,
    HOME_LANE_LENGTH,
    PLAYER_COUNT,
    START_OFFSETS,
    TRACK_LENGTH,
    distance_to_home_entrance,
)
from parcheesi_bench.state import GameState, Pawn, PawnStatus

logger = logging.getLogger(__name__)


class DiceSource(Protocol):
    """Anything with ``randint``: the ``random`` module or a Random instance."""

    def randint(self, a: int, b: int) -> int: ...


# ── Pawn transitions ─────────────────────────────────────────────────

def advance_pawn(pawn: Pawn, steps: int) -> Pawn | None:
    """Return the pawn after moving *steps*, or None if the move is illegal."""
    if pawn.status is PawnStatus.START:
        if steps >= ENTRY_ROLL:
            return pawn.on_track(START_OFFSETS[pawn.color])
        return None

    if pawn.status is PawnStatus.ON_TRACK:
        dist = distance_to_home_entrance(pawn.color, pawn.track_position)
        if steps <= dist:
            return pawn.on_track((pawn.track_position + steps) % TRACK_LENGTH)
        into = steps - dist - 1
        if into < HOME_LANE_LENGTH:
            return pawn.in_home_lane(into)
        if into == HOME_LANE_LENGTH:
            return pawn.at_home()
        return None  # overshoot

    if pawn.status is PawnStatus.IN_HOME_LANE:
        new_offset = pawn.home_lane_offset + steps
        if new_offset < HOME_LANE_LENGTH:
            return pawn.in_home_lane(new_offset)
        if new_offset == HOME_LANE_LENGTH:
            return pawn.at_home()
        return None  # overshoot

    # Home is terminal.
    return None


def can_move(pawn: Pawn, steps: int) -> bool:
    """Cheap legality check used by has_valid_moves."""
    if pawn.status is PawnStatus.START:
        return steps >= ENTRY_ROLL
    if pawn.status is PawnStatus.HOME:
        return False
    if pawn.status is PawnStatus.IN_HOME_LANE:
        return pawn.home_lane_offset + steps <= HOME_LANE_LENGTH

    dist = distance_to_home_entrance(pawn.color, pawn.track_position)
    if steps > dist:
        return (steps - dist - 1) <= HOME_LANE_LENGTH
    return True


# ── State transitions ────────────────────────────────────────────────

def _next_turn(state: GameState) -> int:
    return (state.current_turn + 1) % PLAYER_COUNT


def roll_dice(state: GameState, rng: DiceSource = random) -> GameState:
    """Roll two dice for the active player. No-op if already rolled."""
    if not state.can_roll:
        logger.debug("roll ignored: %s already rolled", state.active_player.name)
        return state

    d1 = rng.randint(1, 6)
    d2 = rng.randint(1, 6)
    return state.with_log(
        f"{state.active_player.name} rolled {d1} and {d2}",
        dice=(d1, d2),
        can_roll=False,
    )


def skip_turn(state: GameState) -> GameState:
    return state.with_log(
        f"{state.active_player.name} skipped turn",
        dice=(),
        can_roll=True,
        current_turn=_next_turn(state),
    )


def move_pawn(state: GameState, pawn_id: str, steps: int) -> GameState:
    """Move *pawn_id* by *steps* and pass the turn.

    Returns *state* unchanged if the pawn doesn't exist or the move is
    illegal; the turn is NOT advanced in that case.
    """
    found = state.find_pawn(pawn_id)
    if found is None:
        logger.debug("move ignored: no pawn %r", pawn_id)
        return state

    player_idx, pawn_idx = found
    player = state.players[player_idx]
    moved = advance_pawn(player.pawns[pawn_idx], steps)
    if moved is None:
        logger.debug("move rejected: %s by %d", pawn_id, steps)
        return state

    pawns = player.pawns[:pawn_idx] + (moved,) + player.pawns[pawn_idx + 1:]
    updated = replace(player, pawns=pawns)
    players = state.players[:player_idx] + (updated,) + state.players[player_idx + 1:]

    winner = state.winner
    if winner is None and updated.all_home:
        winner = player.color

    # The turn rotates even on a winning move.
    return state.with_log(
        f"{player.name} moved {pawn_id}",
        players=players,
        winner=winner,
        dice=(),
        can_roll=True,
        current_turn=_next_turn(state),
    )


def has_valid_moves(state: GameState) -> bool:
    """True if the active player can move any pawn with the current dice."""
    steps = state.dice_total
    if steps == 0:
        return False
    return any(can_move(pawn, steps) for pawn in state.active_player.pawns)


# ── Outcome wrappers ─────────────────────────────────────────────────

@dataclass
class ActionResult:
    ok: bool
    message: str
    state: GameState
    won: bool = False


def try_roll_dice(state: GameState, rng: DiceSource = random) -> ActionResult:
    new_state = roll_dice(state, rng)
    if new_state is state:
        return ActionResult(ok=False, message="Dice already rolled this turn.", state=state)
    d1, d2 = new_state.dice
    return ActionResult(ok=True, message=f"You rolled {d1} and {d2}.", state=new_state)


def try_move_pawn(state: GameState, pawn_id: str, steps: int) -> ActionResult:
    found = state.find_pawn(pawn_id)
    if found is None:
        return ActionResult(ok=False, message=f"Unknown pawn: {pawn_id}", state=state)

    new_state = move_pawn(state, pawn_id, steps)
    if new_state is state:
        pawn = state.players[found[0]].pawns[found[1]]
        return ActionResult(
            ok=False, state=state,
            message=f"Pawn {pawn_id} ({pawn.status.value}) can't move {steps}.",
        )

    won = state.winner is None and new_state.winner is not None
    message = f"Moved {pawn_id}."
    if won:
        message += f" {new_state.winner.value} wins!"
    return ActionResult(ok=True, message=message, state=new_state, won=won)
