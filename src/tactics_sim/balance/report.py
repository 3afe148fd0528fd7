"""Session report assembly, rendering and persistence.

- :class:`ReportCompiler` turns final aggregator counters into a
  :class:`SessionReport` with derived leaderboards.
- :func:`generate_text_report` renders a human-readable summary.
- :func:`save_report` / :func:`load_report` write and read
  ``session_report.json`` (plus ``session_report.txt``).
- :func:`save_match_results` writes per-match JSON for replay viewers.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from tactics_sim.balance.metrics import (
    compute_impact_leaderboards,
    compute_noop_leaderboard,
    compute_usage_anomalies,
)
from tactics_sim.balance.models import ReportMetadata, SessionReport
from tactics_sim.sim.telemetry import match_result_to_json

if TYPE_CHECKING:
    from tactics_sim.balance.aggregator import StatisticsAggregator
    from tactics_sim.sim.config import SessionConfig
    from tactics_sim.sim.telemetry import MatchResult

logger = logging.getLogger(__name__)

REPORT_JSON = "session_report.json"
REPORT_TEXT = "session_report.txt"
MATCHES_DIR = "matches"


class ReportCompiler:
    """Builds the immutable :class:`SessionReport` for a session."""

    def compile(
        self,
        aggregator: StatisticsAggregator,
        config: SessionConfig,
        base_seed: int,
        aborted: bool = False,
    ) -> SessionReport:
        """Assemble the report from *aggregator*'s current counters.

        Parameters
        ----------
        aggregator:
            Aggregator holding the session's statistics.  A snapshot is
            taken so the report never changes afterwards.
        config:
            The session configuration (recorded in the metadata).
        base_seed:
            The base seed actually used (resolved when ``config.base_seed``
            is 0).
        aborted:
            Whether the session stopped before running every match.
        """
        stats = aggregator.snapshot()
        cards = sorted(stats.cards.values(), key=lambda c: c.card_id)
        top, bottom = compute_impact_leaderboards(cards)
        metadata = ReportMetadata(
            generated_at=datetime.now(timezone.utc).isoformat(),
            base_seed=base_seed,
            match_count=config.match_count,
            p1_difficulty=config.p1_difficulty.value,
            p2_difficulty=config.p2_difficulty.value,
            matchup_mode=config.matchup_mode,
            limits=config.limits,
            aborted=aborted,
        )
        return SessionReport(
            metadata=metadata,
            summary=stats.counters,
            cards=cards,
            champions=sorted(stats.champions.values(), key=lambda c: c.name),
            pairs=sorted(stats.pairs.values(), key=lambda p: p.key),
            matchups=sorted(stats.matchups.values(), key=lambda m: m.key),
            noop_leaderboard=compute_noop_leaderboard(cards),
            top_impact=top,
            bottom_impact=bottom,
            usage_anomalies=compute_usage_anomalies(cards),
        )


# ---------------------------------------------------------------------------
# Text rendering
# ---------------------------------------------------------------------------

def generate_text_report(report: SessionReport) -> str:
    """Generate a human-readable summary of the session."""
    meta = report.metadata
    s = report.summary
    lines: list[str] = []

    lines.append("=" * 60)
    lines.append("Balance Simulation Report")
    lines.append(
        f"Matches: {s.matches_completed:,}/{meta.match_count:,} completed"
        f" | Seed: {meta.base_seed} | Generated: {meta.generated_at}"
    )
    lines.append(
        f"Difficulty: P1 {meta.p1_difficulty} / P2 {meta.p2_difficulty}"
        f" | Matchups: {meta.matchup_mode}"
    )
    if meta.aborted:
        lines.append("Session was ABORTED before all matches ran.")
    lines.append("=" * 60)

    lines.append("")
    lines.append("## Summary")
    lines.append(f"  Player 1 wins:    {s.player1_wins}")
    lines.append(f"  Player 2 wins:    {s.player2_wins}")
    lines.append(f"  Draws:            {s.draws}")
    lines.append(f"  Failed matches:   {s.matches_failed}")
    lines.append(f"  Avg rounds:       {s.avg_rounds:.1f}")
    lines.append(
        f"  Endings:          {s.eliminations} elimination, {s.round_limit_finishes}"
        f" round limit, {s.stalemates} stalemate"
    )
    lines.append(f"  Card plays:       {s.total_card_plays} ({s.noop_rate:.1%} no-op)")
    lines.append(f"  Errors/warnings:  {s.errors}/{s.warnings}")

    lines.append("")
    lines.append("## Champions")
    for c in sorted(report.champions, key=lambda c: c.win_rate, reverse=True):
        lines.append(
            f"  {c.name:12s}  wr={c.win_rate:.1%}  picks={c.picks}"
            f"  survival={c.survival_rate:.1%}  kills={c.kills}  dmg={c.damage_dealt}"
        )

    lines.append("")
    lines.append("## Pairs")
    for p in sorted(report.pairs, key=lambda p: p.win_rate, reverse=True):
        lines.append(
            f"  {p.key:24s}  wr={p.win_rate:.1%}  W/L/D={p.wins}/{p.losses}/{p.draws}"
        )

    if report.matchups:
        lines.append("")
        lines.append("## Matchups")
        for m in report.matchups:
            lines.append(
                f"  {m.key:40s}  {m.pair_a_wins}-{m.pair_b_wins}-{m.draws}"
                f"  ({m.matches} matches)"
            )

    lines.append("")
    lines.append("## No-op Leaderboard")
    if not report.noop_leaderboard:
        lines.append("  (none)")
    for e in report.noop_leaderboard:
        lines.append(
            f"  {e.card_id:20s}  noop={e.noop_rate:.1%}  ({e.noop_plays}/{e.plays})"
            f"  reason={e.top_reason or '-'}"
        )

    lines.append("")
    lines.append("## Highest Impact Cards")
    for e in report.top_impact:
        lines.append(f"  {e.card_id:20s}  wr={e.win_rate:.1%}  plays={e.plays}")

    lines.append("")
    lines.append("## Lowest Impact Cards")
    for e in report.bottom_impact:
        lines.append(f"  {e.card_id:20s}  wr={e.win_rate:.1%}  plays={e.plays}")

    lines.append("")
    lines.append("## Usage Anomalies")
    if not report.usage_anomalies:
        lines.append("  (none)")
    for a in report.usage_anomalies:
        lines.append(
            f"  {a.card_id:20s}  {a.kind:16s}  rate={a.rate:.1%}"
            f"  draws={a.draws}  plays={a.plays}  discards={a.hand_limit_discards}"
        )

    lines.append("")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def save_report(report: SessionReport, out_dir: Path, json_only: bool = False) -> list[Path]:
    """Write the report into *out_dir*.  Returns the files written."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    json_path = out_dir / REPORT_JSON
    json_path.write_text(report.model_dump_json(indent=2))
    written = [json_path]
    if not json_only:
        text_path = out_dir / REPORT_TEXT
        text_path.write_text(generate_text_report(report))
        written.append(text_path)
    logger.info("Wrote report to %s", out_dir)
    return written


def load_report(path: Path) -> SessionReport:
    """Load a report from a ``session_report.json`` file or its directory."""
    path = Path(path)
    if path.is_dir():
        path = path / REPORT_JSON
    return SessionReport.model_validate_json(path.read_text())


def save_match_results(results: Iterable[MatchResult], out_dir: Path) -> list[Path]:
    """Write each result to ``out_dir/matches/match_NNNN.json`` (1-based)."""
    match_dir = Path(out_dir) / MATCHES_DIR
    match_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for result in results:
        path = match_dir / f"match_{result.config.index + 1:04d}.json"
        path.write_text(match_result_to_json(result))
        written.append(path)
    logger.info("Wrote %d match files to %s", len(written), match_dir)
    return written
