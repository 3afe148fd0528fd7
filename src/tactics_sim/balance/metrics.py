"""Derived analytics over final card statistics.

Pure functions: each takes the per-card statistics of a session and
returns a sorted leaderboard.  Thresholds are fixed module constants so
reports from different sessions are directly comparable.
"""

from __future__ import annotations

from typing import Iterable

from tactics_sim.balance.models import CardStats, ImpactEntry, NoOpEntry, UsageAnomaly

# No-op leaderboard
NOOP_RATE_THRESHOLD = 0.30
NOOP_MIN_PLAYS = 5

# Impact leaderboards
IMPACT_MIN_PLAYS = 10
IMPACT_TOP_N = 5

# Usage anomalies
NEVER_PLAYED_MIN_DRAWS = 5
USAGE_MIN_DRAWS = 10
RARELY_PLAYED_RATE = 0.10
DISCARD_RATE_THRESHOLD = 0.40


def compute_noop_leaderboard(cards: Iterable[CardStats]) -> list[NoOpEntry]:
    """Cards with a no-op rate of at least 30 % over at least 5 plays.

    Sorted by no-op rate descending, then play count descending.
    """
    entries: list[NoOpEntry] = []
    for stats in cards:
        if stats.plays < NOOP_MIN_PLAYS or stats.noop_rate < NOOP_RATE_THRESHOLD:
            continue
        top_reason = None
        if stats.noop_reasons:
            top_reason = max(sorted(stats.noop_reasons), key=lambda r: stats.noop_reasons[r])
        entries.append(NoOpEntry(
            card_id=stats.card_id,
            plays=stats.plays,
            noop_plays=stats.noop_plays,
            noop_rate=stats.noop_rate,
            top_reason=top_reason,
        ))
    entries.sort(key=lambda e: (-e.noop_rate, -e.plays, e.card_id))
    return entries


def compute_impact_leaderboards(
    cards: Iterable[CardStats],
) -> tuple[list[ImpactEntry], list[ImpactEntry]]:
    """Top and bottom cards by win rate of matches in which they were played.

    Only cards with at least 10 plays qualify.

    Returns
    -------
    tuple[list[ImpactEntry], list[ImpactEntry]]
        ``(top, bottom)``, each at most 5 entries; ``top`` is sorted by win
        rate descending and ``bottom`` ascending.
    """
    qualified = [
        ImpactEntry(
            card_id=stats.card_id,
            plays=stats.plays,
            matches_played_in=stats.matches_played_in,
            win_rate=stats.win_rate_when_played,
        )
        for stats in cards
        if stats.plays >= IMPACT_MIN_PLAYS
    ]
    top = sorted(qualified, key=lambda e: (-e.win_rate, -e.plays, e.card_id))
    bottom = sorted(qualified, key=lambda e: (e.win_rate, -e.plays, e.card_id))
    return top[:IMPACT_TOP_N], bottom[:IMPACT_TOP_N]


def compute_usage_anomalies(cards: Iterable[CardStats]) -> list[UsageAnomaly]:
    """Cards that are drawn but not played, or disproportionately discarded.

    - ``never_played``: zero plays with at least 5 draws.
    - ``rarely_played``: plays/draws below 10 % with at least 10 draws.
    - ``often_discarded``: hand-limit discards/draws of at least 40 % with
      at least 10 draws.

    A card can appear once as a play anomaly and once as a discard anomaly.
    """
    anomalies: list[UsageAnomaly] = []
    for stats in sorted(cards, key=lambda s: s.card_id):
        if stats.plays == 0 and stats.draws >= NEVER_PLAYED_MIN_DRAWS:
            anomalies.append(_anomaly(stats, "never_played", stats.play_rate))
        elif stats.draws >= USAGE_MIN_DRAWS and stats.play_rate < RARELY_PLAYED_RATE:
            anomalies.append(_anomaly(stats, "rarely_played", stats.play_rate))
        if stats.draws >= USAGE_MIN_DRAWS and stats.discard_rate >= DISCARD_RATE_THRESHOLD:
            anomalies.append(_anomaly(stats, "often_discarded", stats.discard_rate))
    return anomalies


def _anomaly(stats: CardStats, kind: str, rate: float) -> UsageAnomaly:
    return UsageAnomaly(
        card_id=stats.card_id,
        kind=kind,
        draws=stats.draws,
        plays=stats.plays,
        hand_limit_discards=stats.hand_limit_discards,
        rate=rate,
    )
