"""CLI entry point: python -m parcheesi_bench {simulate,chart,play}."""

from __future__ import annotations

import argparse
import logging
import random
import sys
import time

from parcheesi_bench.chart import make_win_chart
from parcheesi_bench.game import DEFAULT_MAX_TURNS, GameRunner
from parcheesi_bench.session import AUTO_SKIP, GameSession
from parcheesi_bench.state import GameState, Pawn, PawnStatus
from parcheesi_bench.stats import Outcome, average_turns, tally_wins, win_rates


def _make_rng(seed: int | None) -> random.Random:
    return random.Random(seed)


def _simulate(games: int, max_turns: int, seed: int | None) -> list[Outcome]:
    rng = _make_rng(seed)
    outcomes = []
    for _ in range(games):
        result = GameRunner(rng=rng, max_turns=max_turns).play()
        outcomes.append(Outcome(winner=result.winner, reason=result.reason, turns=result.turns))
    return outcomes


# ── simulate ─────────────────────────────────────────────────────────

def cmd_simulate(args: argparse.Namespace) -> None:
    """Play greedy-vs-CPU games and print the win tally."""
    print(f"Simulating {args.games} games (max {args.max_turns} turns each)...")
    outcomes = _simulate(args.games, args.max_turns, args.seed)

    tally = tally_wins(outcomes)
    rates = win_rates(outcomes)
    print("\nResults")
    print("=" * 40)
    for name, wins in tally.items():
        rate = rates.get(name)
        suffix = f"  ({rate * 100:5.1f}%)" if rate is not None else ""
        print(f"  {name:12s} {wins:6d}{suffix}")
    print(f"\nAverage turns per finished game: {average_turns(outcomes):.1f}")


# ── chart ────────────────────────────────────────────────────────────

def cmd_chart(args: argparse.Namespace) -> None:
    """Simulate games and save a win-rate chart."""
    outcomes = _simulate(args.games, args.max_turns, args.seed)
    if all(o.winner is None for o in outcomes):
        print("No game finished; nothing to chart.", file=sys.stderr)
        sys.exit(1)

    out = args.output or "win_rates.png"
    make_win_chart(tally_wins(outcomes), output_path=out)
    print(f"Chart saved to {out}")


# ── play ─────────────────────────────────────────────────────────────

def _describe_pawn(pawn: Pawn) -> str:
    if pawn.status is PawnStatus.ON_TRACK:
        return f"{pawn.id}: track {pawn.track_position}"
    if pawn.status is PawnStatus.IN_HOME_LANE:
        return f"{pawn.id}: home lane {pawn.home_lane_offset}"
    return f"{pawn.id}: {pawn.status.value}"


def _print_new_logs(state: GameState, shown: int) -> int:
    for line in state.logs[shown:]:
        print(f"  {line}")
    return len(state.logs)


def cmd_play(args: argparse.Namespace) -> None:
    """Play the human seat against three CPU players."""
    session = GameSession(
        rng=_make_rng(args.seed),
        cpu_delay=args.delay,
        auto_skip_delay=args.delay,
    )
    session.join(args.name)
    shown = 0

    while session.state.winner is None:
        shown = _print_new_logs(session.state, shown)
        state = session.state

        if state.active_player.is_cpu or session.pending(AUTO_SKIP) is not None:
            deadline = session.next_deadline()
            if deadline is not None:
                time.sleep(max(0.0, deadline - time.monotonic()))
            session.poll()
            continue

        if state.can_roll:
            if input("Your turn. Press Enter to roll (q to quit): ").strip().lower() == "q":
                return
            session.roll()
            continue

        pawns = state.active_player.pawns
        for i, pawn in enumerate(pawns):
            print(f"  [{i}] {_describe_pawn(pawn)}")
        choice = input(f"Move which pawn by {state.dice_total}? (0-3, s to skip, q to quit): ")
        choice = choice.strip().lower()
        if choice == "q":
            return
        if choice == "s":
            session.skip()
        elif choice.isdigit() and int(choice) < len(pawns):
            before = session.state
            if session.click_pawn(pawns[int(choice)].id) is before:
                print("  That pawn can't move.")
        else:
            print("  Enter a pawn number, s or q.")

    _print_new_logs(session.state, shown)
    print(f"\n{session.state.winner.value} wins!")


# ── main ─────────────────────────────────────────────────────────────

def main() -> None:
    parser = argparse.ArgumentParser(
        prog="parcheesi_bench",
        description="Parcheesi rules engine and CPU simulator",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    p_sim = sub.add_parser("simulate", help="Simulate greedy player vs three CPU players")
    p_sim.add_argument("--games", type=int, default=100, help="Number of games (default 100)")
    p_sim.add_argument("--max-turns", type=int, default=DEFAULT_MAX_TURNS, help="Max turns per game")
    p_sim.add_argument("--seed", type=int, help="Seed for the dice")

    p_chart = sub.add_parser("chart", help="Simulate games and chart win rates")
    p_chart.add_argument("--games", type=int, default=100, help="Number of games (default 100)")
    p_chart.add_argument("--max-turns", type=int, default=DEFAULT_MAX_TURNS, help="Max turns per game")
    p_chart.add_argument("--seed", type=int, help="Seed for the dice")
    p_chart.add_argument("--output", "-o", help="Output PNG path")

    p_play = sub.add_parser("play", help="Play against three CPU players")
    p_play.add_argument("--name", default="Player red", help="Your display name")
    p_play.add_argument("--seed", type=int, help="Seed for the dice")
    p_play.add_argument("--delay", type=float, default=1.0, help="Seconds before CPU moves")

    args = parser.parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "chart":
        cmd_chart(args)
    elif args.command == "play":
        cmd_play(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
