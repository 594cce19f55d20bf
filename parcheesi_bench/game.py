"""Game runner: plays one four-seat game to completion, synchronously."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from parcheesi_bench.board import HOME_LANE_LENGTH, Color
from parcheesi_bench.cpu import is_stalled, perform_cpu_turn
from parcheesi_bench.rules import (
    ActionResult,
    DiceSource,
    advance_pawn,
    has_valid_moves,
    roll_dice,
    skip_turn,
    try_move_pawn,
)
from parcheesi_bench.state import GameState, Pawn, PawnStatus, initialize


# ── Player interface ─────────────────────────────────────────────────

@runtime_checkable
class Player(Protocol):
    """Controller for the human seat."""

    @property
    def name(self) -> str: ...

    def choose_pawn(self, state: GameState) -> str | None: ...


@dataclass
class GreedyPlayer:
    """Default controller for the human seat when simulating.

    Takes a pawn home when it can, otherwise the first legal move in pawn
    order. A move that would park a pawn on the last lane cell is skipped:
    two dice never total 1, so that pawn could never finish.
    """

    display_name: str = "Greedy"

    @property
    def name(self) -> str:
        return self.display_name

    def choose_pawn(self, state: GameState) -> str | None:
        steps = state.dice_total
        best_id, best_score = None, 0
        for pawn in state.active_player.pawns:
            moved = advance_pawn(pawn, steps)
            if moved is None:
                continue
            score = _move_score(moved)
            if score > best_score:
                best_id, best_score = pawn.id, score
        return best_id


def _move_score(moved: Pawn) -> int:
    if moved.status is PawnStatus.HOME:
        return 2
    if moved.status is PawnStatus.IN_HOME_LANE and moved.home_lane_offset == HOME_LANE_LENGTH - 1:
        return 0
    return 1


# ── Structured types ────────────────────────────────────────────────

@dataclass
class LogEntry:
    """Record of a single action during a game."""

    turn_number: int
    player: int
    color: Color
    action: str  # "roll" | "move" | "skip" | "cpu_turn"
    result_ok: bool
    message: str
    pawn_id: str | None = None
    dice: tuple[int, ...] = ()
    is_winning_move: bool = False


@dataclass
class GameResult:
    winner: Color | None
    reason: str  # "win" | "max_turns"
    turns: int = 0
    final_state: GameState | None = None
    log: list[LogEntry] = field(default_factory=list)


# ── Observer ────────────────────────────────────────────────────────

class GameObserver(Protocol):
    """Receives structured events as a game is played."""

    def on_action(self, entry: LogEntry) -> None: ...


@dataclass
class ListObserver:
    """Default observer, collects entries into a list."""

    entries: list[LogEntry] = field(default_factory=list)

    def on_action(self, entry: LogEntry) -> None:
        self.entries.append(entry)


# ── Runner ───────────────────────────────────────────────────────────

MAX_ACTIONS_PER_TURN = 10  # rejected picks before the seat is skipped
DEFAULT_MAX_TURNS = 500


class GameRunner:
    """Play one full game. CPU seats use the scripted strategy."""

    def __init__(
        self,
        human: Player | None = None,
        rng: DiceSource = random,
        max_turns: int = DEFAULT_MAX_TURNS,
        observer: GameObserver | None = None,
        state: GameState | None = None,
    ):
        self.human = human or GreedyPlayer()
        self.rng = rng
        self.max_turns = max_turns
        self.observer = observer or ListObserver()
        self.state = state or initialize(human_name=self.human.name)
        self.turn_number = 0

    def play(self) -> GameResult:
        log: list[LogEntry] = []

        while self.state.winner is None and self.turn_number < self.max_turns:
            self.turn_number += 1
            if self.state.active_player.is_cpu:
                log.extend(self._play_cpu_turn())
            else:
                log.extend(self._play_human_turn())

        reason = "win" if self.state.winner is not None else "max_turns"
        return GameResult(
            winner=self.state.winner,
            reason=reason,
            turns=self.turn_number,
            final_state=self.state,
            log=log,
        )

    def _emit(self, entry: LogEntry) -> LogEntry:
        self.observer.on_action(entry)
        return entry

    def _entry(self, action: str, ok: bool, message: str, **kwargs) -> LogEntry:
        player_idx = self.state.current_turn
        return LogEntry(
            turn_number=self.turn_number,
            player=player_idx,
            color=self.state.players[player_idx].color,
            action=action,
            result_ok=ok,
            message=message,
            **kwargs,
        )

    def _play_cpu_turn(self) -> list[LogEntry]:
        before = self.state
        dice = _RecordingDice(self.rng)
        after = perform_cpu_turn(before, dice)
        stalled = is_stalled(after)
        if stalled:
            after = skip_turn(after)

        # Everything the turn appended to the transcript
        message = "; ".join(after.logs[len(before.logs):])
        entry = self._entry(
            "cpu_turn", not stalled, message,
            dice=tuple(dice.faces),
            is_winning_move=before.winner is None and after.winner is not None,
        )
        self.state = after
        return [self._emit(entry)]

    def _play_human_turn(self) -> list[LogEntry]:
        entries = []
        self.state = roll_dice(self.state, self.rng)
        dice = self.state.dice
        entries.append(self._emit(self._entry("roll", True, self.state.logs[-1], dice=dice)))

        if not has_valid_moves(self.state):
            entries.append(self._emit(self._entry("skip", True, "No valid moves.", dice=dice)))
            self.state = skip_turn(self.state)
            return entries

        player = self.state.active_player
        own = {pawn.id for pawn in player.pawns}
        rejected: set[str] = set()
        for _ in range(MAX_ACTIONS_PER_TURN):
            pawn_id = self.human.choose_pawn(self.state)
            if pawn_id is None or pawn_id in rejected:
                break
            if pawn_id in own:
                result = try_move_pawn(self.state, pawn_id, self.state.dice_total)
            else:
                result = ActionResult(
                    ok=False, message=f"{pawn_id} is not {player.name}'s pawn.", state=self.state,
                )
            entry = self._entry(
                "move", result.ok, result.message,
                pawn_id=pawn_id, dice=dice, is_winning_move=result.won,
            )
            entries.append(self._emit(entry))
            if result.ok:
                self.state = result.state
                return entries
            rejected.add(pawn_id)

        entries.append(self._emit(self._entry("skip", True, "Turn skipped.", dice=dice)))
        self.state = skip_turn(self.state)
        return entries


class _RecordingDice:
    """Wraps a dice source and remembers the faces it produced."""

    def __init__(self, rng: DiceSource):
        self.rng = rng
        self.faces: list[int] = []

    def randint(self, a: int, b: int) -> int:
        value = self.rng.randint(a, b)
        self.faces.append(value)
        return value
