"""Balance analysis: running statistics, derived leaderboards and reports."""

from tactics_sim.balance.aggregator import StatisticsAggregator
from tactics_sim.balance.metrics import (
    compute_impact_leaderboards,
    compute_noop_leaderboard,
    compute_usage_anomalies,
)
from tactics_sim.balance.models import (
    CardStats,
    ChampionStats,
    GlobalCounters,
    ImpactEntry,
    MatchupStats,
    NoOpEntry,
    PairStats,
    ReportMetadata,
    SessionReport,
    UsageAnomaly,
)
from tactics_sim.balance.report import (
    ReportCompiler,
    generate_text_report,
    load_report,
    save_match_results,
    save_report,
)

__all__ = [
    "CardStats",
    "ChampionStats",
    "GlobalCounters",
    "ImpactEntry",
    "MatchupStats",
    "NoOpEntry",
    "PairStats",
    "ReportCompiler",
    "ReportMetadata",
    "SessionReport",
    "StatisticsAggregator",
    "UsageAnomaly",
    "compute_impact_leaderboards",
    "compute_noop_leaderboard",
    "compute_usage_anomalies",
    "generate_text_report",
    "load_report",
    "save_match_results",
    "save_report",
]
