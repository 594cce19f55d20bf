"""Tests for parcheesi_bench.session (delayed triggers driven by a fake clock)."""

from dataclasses import replace

from parcheesi_bench.board import Color
from parcheesi_bench.session import AUTO_SKIP, CPU_TURN, GameSession
from parcheesi_bench.state import GameState, Pawn, PawnStatus, initialize


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeDice:
    def __init__(self, *faces: int):
        self.faces = list(faces)

    def randint(self, a: int, b: int) -> int:
        return self.faces.pop(0)


def _session(state: GameState | None = None, *faces: int, joined: bool = True):
    clock = FakeClock()
    session = GameSession(
        state=state,
        rng=FakeDice(*faces),
        clock=clock,
        cpu_delay=1.0,
        auto_skip_delay=1.5,
        joined=joined,
    )
    return session, clock


def _cpu_turn_state(turn: int = 1) -> GameState:
    return replace(initialize(), current_turn=turn)


# ── CPU trigger ──────────────────────────────────────────────────────

def test_cpu_trigger_waits_for_join():
    session, _ = _session(_cpu_turn_state(), joined=False)
    assert session.pending(CPU_TURN) is None


def test_cpu_trigger_fires_after_delay():
    session, _ = _session(_cpu_turn_state(), 1, 2)
    assert session.pending(CPU_TURN).due == 1.0

    assert session.poll(0.5) == []
    assert session.state.current_turn == 1

    assert session.poll(1.0) == [CPU_TURN]
    # Blue rolled 3 with everything in start, so it skipped
    assert session.state.current_turn == 2
    assert session.state.logs[-1] == "CPU blue skipped turn"


def test_cpu_trigger_rearms_for_next_cpu():
    session, _ = _session(_cpu_turn_state(), 1, 2)
    session.poll(1.0)
    assert session.pending(CPU_TURN).due == 2.0


def test_no_cpu_trigger_on_human_turn():
    session, _ = _session(initialize())
    assert session.pending(CPU_TURN) is None


def test_no_cpu_trigger_once_there_is_a_winner():
    session, _ = _session(replace(_cpu_turn_state(), winner=Color.RED))
    assert session.pending(CPU_TURN) is None
    assert session.next_deadline() is None


def test_unrelated_change_keeps_the_pending_trigger():
    session, clock = _session(_cpu_turn_state())
    clock.now = 0.5
    session.select("blue-0")
    assert session.pending(CPU_TURN).due == 1.0


def test_changed_players_rearm_the_pending_trigger():
    session, clock = _session(_cpu_turn_state(), 1, 2)
    first = session.pending(CPU_TURN)
    assert first.due == 1.0

    clock.now = 0.5
    session.join("Ada")
    rearmed = session.pending(CPU_TURN)
    assert rearmed is not first
    assert rearmed.due == 1.5
    assert rearmed.key == (1, None, session.state.players)

    # The cancelled deadline no longer fires
    assert session.poll(1.0) == []
    assert session.state.current_turn == 1
    assert session.poll(1.5) == [CPU_TURN]
    assert session.state.current_turn == 2


def test_stalled_cpu_turn_is_skipped():
    blue = [Pawn(id=f"blue-{i}", color=Color.BLUE) for i in range(4)]
    state = _cpu_turn_state()
    players = list(state.players)
    players[1] = replace(
        players[1],
        pawns=(blue[0].on_track(40),) + tuple(p.at_home() for p in blue[1:]),
    )
    state = replace(state, players=tuple(players))

    session, _ = _session(state, 6, 6)  # 12 from two cells before the entrance
    session.poll(1.0)

    assert session.state.players[1].pawns[0].track_position == 40
    assert session.state.current_turn == 2
    assert session.state.dice == ()
    assert session.state.can_roll is True


# ── human actions ────────────────────────────────────────────────────

def test_roll_then_click_moves_pawn():
    session, _ = _session(initialize(), 3, 2)
    session.roll()
    assert session.pending(AUTO_SKIP) is None

    session.click_pawn("red-0")
    assert session.state.players[0].pawns[0].status is PawnStatus.ON_TRACK
    assert session.state.current_turn == 1
    assert session.pending(CPU_TURN) is not None


def test_click_before_rolling_is_ignored():
    session, _ = _session(initialize())
    before = session.state
    assert session.click_pawn("red-0") is before


def test_click_on_another_players_pawn_is_ignored():
    session, _ = _session(initialize(), 3, 2)
    rolled = session.roll()
    assert session.click_pawn("blue-0") is rolled


def test_roll_is_ignored_on_cpu_turn():
    session, _ = _session(_cpu_turn_state())
    before = session.state
    assert session.roll() is before


def test_skip_needs_a_roll_first():
    session, _ = _session(initialize(), 3, 2)
    before = session.state
    assert session.skip() is before

    session.roll()
    assert session.skip().current_turn == 1


def test_join_seats_the_human():
    session, _ = _session(initialize(), joined=False)
    session.join("Ada")
    assert session.joined
    assert session.state.players[0].name == "Ada"
    assert session.state.players[0].has_paid is True


# ── auto-skip trigger ────────────────────────────────────────────────

def test_auto_skip_when_no_move_is_possible():
    session, clock = _session(initialize(), 1, 1)
    clock.now = 10.0
    session.roll()
    assert session.pending(AUTO_SKIP).due == 11.5

    assert session.poll(11.0) == []
    assert session.poll(11.5) == [AUTO_SKIP]
    assert session.state.current_turn == 1
    assert session.pending(AUTO_SKIP) is None
    assert session.pending(CPU_TURN).due == 12.5


def test_manual_skip_cancels_auto_skip():
    session, _ = _session(initialize(), 1, 1)
    session.roll()
    assert session.pending(AUTO_SKIP) is not None

    session.skip()
    assert session.pending(AUTO_SKIP) is None
    assert session.state.current_turn == 1


def test_at_most_one_trigger_of_each_kind():
    session, _ = _session(initialize(), 1, 1)
    session.roll()
    session.select("red-0")
    session.select("red-1")
    assert session.poll(100.0) == [AUTO_SKIP]
    # Only the CPU trigger armed by the skip remains
    assert session.pending(AUTO_SKIP) is None
    assert session.pending(CPU_TURN) is not None


def test_next_deadline():
    session, _ = _session(_cpu_turn_state())
    assert session.next_deadline() == 1.0
