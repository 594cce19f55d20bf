"""Render the outcome of a batch of simulated games as a bar chart."""

from __future__ import annotations

import matplotlib
matplotlib.use("Agg")  # non-interactive backend

import matplotlib.pyplot as plt

from parcheesi_bench.board import PLAYER_COUNT, TURN_ORDER
from parcheesi_bench.stats import UNFINISHED

# fmt: off
BAR_COLORS = {
    "red":      "#C95353",
    "blue":     "#1E88E5",
    "green":    "#3F8F43",
    "yellow":   "#F9A825",
    UNFINISHED: "#9E9E9E",
}
# fmt: on

SEAT_LABELS = {color.value: f"{color.value} (seat {i})" for i, color in enumerate(TURN_ORDER)}


def make_win_chart(
    tally: dict[str, int],
    output_path: str = "win_rates.png",
    title: str = "Parcheesi outcomes",
) -> str:
    """Save one bar per seat color, in turn order, plus an "unfinished" bar.

    Bars are each outcome's share of all games played. The dashed line marks
    the share every seat would get if all games finished and no seat had an
    edge. Returns the path to the saved PNG.
    """
    games = sum(tally.values())
    names = [c.value for c in TURN_ORDER if c.value in tally]
    if UNFINISHED in tally:
        names.append(UNFINISHED)
    counts = [tally[name] for name in names]
    shares = [100 * count / games if games else 0.0 for count in counts]

    fig, ax = plt.subplots(figsize=(8, 1 + len(names) * 0.6))
    bars = ax.barh(
        [SEAT_LABELS.get(name, name) for name in names], shares,
        color=[BAR_COLORS.get(name, "#4A90D9") for name in names],
        edgecolor="white",
    )
    if names and names[-1] == UNFINISHED:
        bars[-1].set_hatch("//")

    for bar, count, share in zip(bars, counts, shares):
        ax.text(
            bar.get_width() + 1, bar.get_y() + bar.get_height() / 2,
            f"{count} ({share:.0f}%)",
            va="center", fontsize=10,
        )

    ax.axvline(100 / PLAYER_COUNT, color="#555555", linestyle="--", linewidth=1)
    ax.set_xlabel("Share of games (%)")
    ax.set_title(f"{title} ({games} games)", fontsize=13)
    ax.invert_yaxis()  # red on top
    ax.set_xlim(0, 110)

    plt.tight_layout()
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path
