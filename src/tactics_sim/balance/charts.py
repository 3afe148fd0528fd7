"""Optional balance charts rendered from a :class:`SessionReport`.

Uses the non-interactive Agg backend so charts render in headless batch
runs.  Produces one PNG with four panels: champion win rates, pair win
rates, card no-op rates and card play rates.
"""

from __future__ import annotations

import logging
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from tactics_sim.balance.metrics import NOOP_RATE_THRESHOLD
from tactics_sim.balance.models import SessionReport

logger = logging.getLogger(__name__)

CHART_FILE = "balance_charts.png"

_WIN_COLOR = "#2ecc71"
_LOSS_COLOR = "#e74c3c"
_NEUTRAL_COLOR = "#3498db"


def generate_charts(report: SessionReport, out_dir: Path) -> Path:
    """Render the balance charts for *report* into *out_dir*.

    Returns the path of the written PNG.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    s = report.summary
    fig.suptitle(
        f"Balance Report: {s.matches_completed} matches (seed {report.metadata.base_seed})",
        fontsize=16, fontweight="bold",
    )

    # --- Chart 1: Champion win rates ---
    ax = axes[0, 0]
    champions = sorted(report.champions, key=lambda c: c.win_rate, reverse=True)
    rates = np.array([c.win_rate * 100 for c in champions])
    colors = [_WIN_COLOR if r >= 50 else _LOSS_COLOR for r in rates]
    ax.bar([c.name for c in champions], rates, color=colors, edgecolor="black", linewidth=0.5)
    ax.axhline(50, color="black", linestyle="--", linewidth=0.8)
    ax.set_ylabel("Win Rate (%)")
    ax.set_title("Champion Win Rate")
    ax.set_ylim(0, 100)
    ax.tick_params(axis="x", rotation=45)

    # --- Chart 2: Pair win rates ---
    ax = axes[0, 1]
    pairs = sorted(report.pairs, key=lambda p: p.win_rate)
    positions = np.arange(len(pairs))
    ax.barh(positions, [p.win_rate * 100 for p in pairs], color=_NEUTRAL_COLOR,
            edgecolor="black", linewidth=0.3)
    ax.set_yticks(positions)
    ax.set_yticklabels([p.key for p in pairs], fontsize=8)
    ax.axvline(50, color="black", linestyle="--", linewidth=0.8)
    ax.set_xlabel("Win Rate (%)")
    ax.set_title("Pair Win Rate")
    ax.set_xlim(0, 100)

    # --- Chart 3: No-op rate per card ---
    ax = axes[1, 0]
    played = sorted((c for c in report.cards if c.plays), key=lambda c: c.noop_rate, reverse=True)
    noop = np.array([c.noop_rate * 100 for c in played])
    ax.bar([c.card_id for c in played], noop,
           color=[_LOSS_COLOR if r >= NOOP_RATE_THRESHOLD * 100 else _NEUTRAL_COLOR for r in noop],
           edgecolor="black", linewidth=0.3)
    ax.axhline(NOOP_RATE_THRESHOLD * 100, color="black", linestyle="--", linewidth=0.8)
    ax.set_ylabel("No-op Rate (%)")
    ax.set_title("Card No-op Rate")
    ax.tick_params(axis="x", rotation=90, labelsize=7)

    # --- Chart 4: Play rate vs draws ---
    ax = axes[1, 1]
    drawn = [c for c in report.cards if c.draws]
    draws = np.array([c.draws for c in drawn])
    play_rates = np.array([c.play_rate * 100 for c in drawn])
    ax.scatter(draws, play_rates, color=_NEUTRAL_COLOR, edgecolor="black", linewidth=0.3)
    for card, x, y in zip(drawn, draws, play_rates):
        ax.annotate(card.card_id, (x, y), fontsize=6, alpha=0.7)
    ax.set_xlabel("Times Drawn")
    ax.set_ylabel("Plays per Draw (%)")
    ax.set_title("Card Usage")

    plt.tight_layout()
    out_path = out_dir / CHART_FILE
    plt.savefig(out_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.info("Chart saved to %s", out_path)
    return out_path
