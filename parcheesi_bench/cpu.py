"""Scripted strategy for computer-controlled seats."""

from __future__ import annotations

import random

from parcheesi_bench.board import ENTRY_ROLL
from parcheesi_bench.rules import DiceSource, move_pawn, roll_dice, skip_turn
from parcheesi_bench.state import GameState, PawnStatus, Player


def choose_cpu_pawn(player: Player, steps: int) -> str | None:
    """Pick the pawn a CPU player moves with *steps*, or None to skip.

    Priority: enter a start pawn on an exact entry roll, otherwise advance
    the first pawn on the track. Home-lane pawns are never picked.
    """
    if steps == ENTRY_ROLL:
        for pawn in player.pawns:
            if pawn.status is PawnStatus.START:
                return pawn.id
    for pawn in player.pawns:
        if pawn.status is PawnStatus.ON_TRACK:
            return pawn.id
    return None


def perform_cpu_turn(state: GameState, rng: DiceSource = random) -> GameState:
    """Roll and move (or skip) for the active player."""
    state = roll_dice(state, rng)
    pawn_id = choose_cpu_pawn(state.active_player, state.dice_total)
    if pawn_id is None:
        return skip_turn(state)
    # A rejected move comes back with the dice still pending.
    return move_pawn(state, pawn_id, state.dice_total)


def is_stalled(state: GameState) -> bool:
    """True if a turn ended with a roll still unresolved."""
    return not state.can_roll and bool(state.dice)
