"""Session controller: owns the live GameState and its delayed triggers.

The rules engine is pure; something still has to hold the current snapshot,
turn human clicks into engine calls, and let CPU seats play after a short
delay. GameSession does that without threads: triggers are armed with a
deadline and only fire from ``poll()``, so a UI loop (or a test) decides
when time passes.

Two kinds of trigger exist, at most one pending of each:

* ``cpu_turn``: the active seat is CPU, the session is joined and there
  is no winner. Fires ``perform_cpu_turn`` once.
* ``auto_skip``: the human has rolled and has no legal move. Fires
  ``skip_turn``.

Each trigger remembers the slice of state it was armed for. Whenever that
slice changes the trigger is cancelled and, if its condition still holds,
re-armed with a fresh deadline.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable

from parcheesi_bench.cpu import is_stalled, perform_cpu_turn
from parcheesi_bench.rules import (
    DiceSource,
    has_valid_moves,
    move_pawn,
    roll_dice,
    skip_turn,
)
from parcheesi_bench.state import GameState, initialize, seat_human, select_pawn

logger = logging.getLogger(__name__)

CPU_TURN = "cpu_turn"
AUTO_SKIP = "auto_skip"

CPU_TURN_DELAY = 1.0  # seconds
AUTO_SKIP_DELAY = 1.5


@dataclass
class PendingTrigger:
    kind: str
    due: float
    key: tuple


class GameSession:
    """Single owner of one game's state."""

    def __init__(
        self,
        state: GameState | None = None,
        rng: DiceSource = random,
        clock: Callable[[], float] = time.monotonic,
        cpu_delay: float = CPU_TURN_DELAY,
        auto_skip_delay: float = AUTO_SKIP_DELAY,
        joined: bool = False,
    ):
        self._state = state or initialize()
        self.rng = rng
        self.clock = clock
        self.cpu_delay = cpu_delay
        self.auto_skip_delay = auto_skip_delay
        self.joined = joined
        self._pending: dict[str, PendingTrigger] = {}
        self._reschedule(self.clock())

    @property
    def state(self) -> GameState:
        return self._state

    def pending(self, kind: str) -> PendingTrigger | None:
        return self._pending.get(kind)

    def next_deadline(self) -> float | None:
        if not self._pending:
            return None
        return min(t.due for t in self._pending.values())

    # ── Human actions ───────────────────────────────────────────────

    def join(self, name: str, has_paid: bool = True) -> GameState:
        """Seat the human after the (external) join flow succeeds."""
        self.joined = True
        return self._replace(seat_human(self._state, name, has_paid))

    def roll(self) -> GameState:
        if self._state.active_player.is_cpu:
            return self._state
        return self._replace(roll_dice(self._state, self.rng))

    def skip(self) -> GameState:
        if self._state.active_player.is_cpu or self._state.can_roll:
            return self._state
        return self._replace(skip_turn(self._state))

    def select(self, pawn_id: str | None) -> GameState:
        return self._replace(select_pawn(self._state, pawn_id))

    def click_pawn(self, pawn_id: str) -> GameState:
        """Move one of the active player's pawns by the rolled total."""
        state = self._state
        player = state.active_player
        if player.is_cpu or not state.dice:
            return state
        if all(p.id != pawn_id for p in player.pawns):
            return state
        return self._replace(move_pawn(state, pawn_id, state.dice_total))

    # ── Timers ──────────────────────────────────────────────────────

    def poll(self, now: float | None = None) -> list[str]:
        """Fire every trigger whose deadline has passed. Returns their kinds."""
        if now is None:
            now = self.clock()
        fired = []
        for kind in (CPU_TURN, AUTO_SKIP):
            trigger = self._pending.get(kind)
            if trigger is None or trigger.due > now:
                continue
            del self._pending[kind]
            if kind == CPU_TURN:
                self._play_cpu_turn(now)
            else:
                logger.debug("auto-skipping %s", self._state.active_player.name)
                self._replace(skip_turn(self._state), now)
            fired.append(kind)
        return fired

    def _play_cpu_turn(self, now: float) -> None:
        state = perform_cpu_turn(self._state, self.rng)
        if is_stalled(state):
            # Chosen pawn could not move; pass the turn.
            logger.debug("CPU turn stalled for %s", state.active_player.name)
            state = skip_turn(state)
        self._replace(state, now)

    def _replace(self, state: GameState, now: float | None = None) -> GameState:
        self._state = state
        self._reschedule(self.clock() if now is None else now)
        return state

    def _reschedule(self, now: float) -> None:
        state = self._state
        player = state.active_player

        cpu_wanted = self.joined and player.is_cpu and state.winner is None
        self._arm(CPU_TURN, cpu_wanted, (state.current_turn, state.winner, state.players),
                  now + self.cpu_delay)

        skip_wanted = bool(state.dice) and not player.is_cpu and not has_valid_moves(state)
        self._arm(AUTO_SKIP, skip_wanted, (state.dice, state.current_turn, state.players),
                  now + self.auto_skip_delay)

    def _arm(self, kind: str, wanted: bool, key: tuple, due: float) -> None:
        current = self._pending.get(kind)
        if current is not None and (not wanted or current.key != key):
            logger.debug("cancelled %s", kind)
            del self._pending[kind]
            current = None
        if wanted and current is None:
            logger.debug("armed %s at %.2f", kind, due)
            self._pending[kind] = PendingTrigger(kind=kind, due=due, key=key)
