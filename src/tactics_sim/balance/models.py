"""Pydantic v2 models for session balance statistics.

Running statistics (per card, champion, pair and matchup, plus global
counters) are mutable models owned by the
:class:`~tactics_sim.balance.aggregator.StatisticsAggregator`.  Their
counters only ever grow.  Derived rates are exposed as computed fields so
they appear in the serialized report.

:class:`SessionReport` is the immutable external artifact assembled at the
end of a session.  All models are serializable to/from JSON.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from tactics_sim.sim.config import SafetyLimits


def _rate(numerator: int, denominator: int) -> float:
    return numerator / denominator if denominator else 0.0


def pair_key(champions: list[str] | tuple[str, ...]) -> str:
    """Order-independent key for a two-champion roster (``"Brute+Ranger"``)."""
    return "+".join(sorted(champions))


def matchup_key(roster_a: list[str], roster_b: list[str]) -> tuple[str, bool]:
    """Canonical ``"A+B vs C+D"`` key for a matchup.

    Returns the key and whether *roster_a* was placed on the right-hand
    side to make the key canonical.
    """
    key_a, key_b = pair_key(roster_a), pair_key(roster_b)
    if key_a <= key_b:
        return f"{key_a} vs {key_b}", False
    return f"{key_b} vs {key_a}", True


# ---------------------------------------------------------------------------
# Running statistics
# ---------------------------------------------------------------------------

class CardStats(BaseModel):
    """Per-card play, effect and usage counters."""

    card_id: str
    champion: str = ""
    # Usage
    draws: int = 0
    hand_limit_discards: int = 0
    """Copies discarded at end of turn because the hand was over the limit."""
    held_at_end: int = 0
    """Copies still in hand when a match ended."""
    # Plays, tagged with the outcome for the casting side
    plays: int = 0
    plays_in_wins: int = 0
    plays_in_losses: int = 0
    plays_in_draws: int = 0
    noop_plays: int = 0
    noop_reasons: dict[str, int] = Field(default_factory=dict)
    # Effect totals across all plays
    damage: int = 0
    heal: int = 0
    buff: int = 0
    debuff: int = 0
    movement: int = 0
    draw: int = 0
    mana: int = 0
    # Win correlation: matches in which the card was played at least once
    matches_played_in: int = 0
    wins_when_played: int = 0
    losses_when_played: int = 0
    draws_when_played: int = 0

    @computed_field
    @property
    def play_rate(self) -> float:
        """plays / draws."""
        return _rate(self.plays, self.draws)

    @computed_field
    @property
    def noop_rate(self) -> float:
        return _rate(self.noop_plays, self.plays)

    @computed_field
    @property
    def discard_rate(self) -> float:
        """hand_limit_discards / draws."""
        return _rate(self.hand_limit_discards, self.draws)

    @computed_field
    @property
    def win_rate_when_played(self) -> float:
        return _rate(self.wins_when_played, self.matches_played_in)


class ChampionStats(BaseModel):
    """Per-champion pick, outcome and survival counters."""

    name: str
    picks: int = 0
    """Matches this champion was registered for (including failed ones)."""
    matches: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    survived: int = 0
    deaths: int = 0
    kills: int = 0
    damage_dealt: int = 0

    @computed_field
    @property
    def win_rate(self) -> float:
        return _rate(self.wins, self.matches)

    @computed_field
    @property
    def survival_rate(self) -> float:
        return _rate(self.survived, self.matches)


class PairStats(BaseModel):
    """Counters for a two-champion roster regardless of seat."""

    key: str
    champions: list[str]
    picks: int = 0
    matches: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0

    @computed_field
    @property
    def win_rate(self) -> float:
        return _rate(self.wins, self.matches)


class MatchupStats(BaseModel):
    """Head-to-head counters for one canonical pair-versus-pair matchup."""

    key: str
    pair_a: str
    pair_b: str
    matches: int = 0
    pair_a_wins: int = 0
    pair_b_wins: int = 0
    draws: int = 0

    @computed_field
    @property
    def pair_a_win_rate(self) -> float:
        return _rate(self.pair_a_wins, self.matches)


class GlobalCounters(BaseModel):
    """Session-wide counters.

    ``player1_wins + player2_wins + draws == matches_completed`` always
    holds.
    """

    matches_attempted: int = 0
    matches_completed: int = 0
    matches_failed: int = 0
    player1_wins: int = 0
    player2_wins: int = 0
    draws: int = 0
    eliminations: int = 0
    stalemates: int = 0
    round_limit_finishes: int = 0
    total_rounds: int = 0
    total_turns: int = 0
    total_actions: int = 0
    total_card_plays: int = 0
    total_noop_plays: int = 0
    errors: int = 0
    warnings: int = 0

    @computed_field
    @property
    def avg_rounds(self) -> float:
        return _rate(self.total_rounds, self.matches_completed)

    @computed_field
    @property
    def noop_rate(self) -> float:
        return _rate(self.total_noop_plays, self.total_card_plays)


# ---------------------------------------------------------------------------
# Derived analytics
# ---------------------------------------------------------------------------

class NoOpEntry(BaseModel):
    """A card that frequently does nothing when played."""

    card_id: str
    plays: int
    noop_plays: int
    noop_rate: float
    top_reason: str | None = None


class ImpactEntry(BaseModel):
    """A card's win correlation."""

    card_id: str
    plays: int
    matches_played_in: int
    win_rate: float
    """Win rate of matches in which the card was played at least once."""


class UsageAnomaly(BaseModel):
    """A card drawn often but rarely played, or often discarded."""

    card_id: str
    kind: Literal["never_played", "rarely_played", "often_discarded"]
    draws: int
    plays: int
    hand_limit_discards: int
    rate: float
    """play_rate for played anomalies, discard_rate for discards."""


# ---------------------------------------------------------------------------
# Session report
# ---------------------------------------------------------------------------

class ReportMetadata(BaseModel):
    generated_at: str
    """ISO 8601 timestamp."""
    base_seed: int
    match_count: int
    """Matches requested."""
    p1_difficulty: str
    p2_difficulty: str
    matchup_mode: str
    limits: SafetyLimits
    aborted: bool = False


class SessionReport(BaseModel):
    """Top-level report for one session."""

    model_config = ConfigDict(frozen=True)

    metadata: ReportMetadata
    summary: GlobalCounters
    cards: list[CardStats] = Field(default_factory=list)
    champions: list[ChampionStats] = Field(default_factory=list)
    pairs: list[PairStats] = Field(default_factory=list)
    matchups: list[MatchupStats] = Field(default_factory=list)
    noop_leaderboard: list[NoOpEntry] = Field(default_factory=list)
    top_impact: list[ImpactEntry] = Field(default_factory=list)
    bottom_impact: list[ImpactEntry] = Field(default_factory=list)
    usage_anomalies: list[UsageAnomaly] = Field(default_factory=list)
