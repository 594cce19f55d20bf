"""Win tallies across many simulated games."""

from __future__ import annotations

from dataclasses import dataclass

from parcheesi_bench.board import TURN_ORDER, Color

UNFINISHED = "unfinished"


@dataclass
class Outcome:
    """Result of a single game."""

    winner: Color | None  # None = hit the turn limit
    reason: str
    turns: int


def tally_wins(outcomes: list[Outcome]) -> dict[str, int]:
    """Count wins per color name, plus games that never finished.

    Every color appears in the result, even with zero wins.
    """
    tally = {color.value: 0 for color in TURN_ORDER}
    tally[UNFINISHED] = 0
    for outcome in outcomes:
        key = outcome.winner.value if outcome.winner is not None else UNFINISHED
        tally[key] += 1
    return tally


def win_rates(outcomes: list[Outcome]) -> dict[str, float]:
    """Fraction of finished games each color won."""
    tally = tally_wins(outcomes)
    finished = len(outcomes) - tally.pop(UNFINISHED)
    if finished == 0:
        return {name: 0.0 for name in tally}
    return {name: wins / finished for name, wins in tally.items()}


def average_turns(outcomes: list[Outcome]) -> float:
    finished = [o.turns for o in outcomes if o.winner is not None]
    if not finished:
        return 0.0
    return sum(finished) / len(finished)
