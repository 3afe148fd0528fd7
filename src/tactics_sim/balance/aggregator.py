"""Running cross-match statistics.

The :class:`StatisticsAggregator` folds match results into per-card,
per-champion, per-pair and per-matchup counters as the session runs.
Entries are created lazily on first sight and counters are only ever
incremented, so the aggregate can be snapshotted at any point between
matches.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tactics_sim.balance.models import (
    CardStats,
    ChampionStats,
    GlobalCounters,
    MatchupStats,
    PairStats,
    matchup_key,
    pair_key,
)
from tactics_sim.sim.telemetry import WinReason

if TYPE_CHECKING:
    from tactics_sim.sim.content.registry import ContentRegistry
    from tactics_sim.sim.telemetry import MatchResult

logger = logging.getLogger(__name__)

_WIN, _LOSS, _DRAW = "win", "loss", "draw"


def _side_outcome(winner: int, player: int) -> str:
    if winner == 0:
        return _DRAW
    return _WIN if winner == player else _LOSS


class StatisticsAggregator:
    """Monotonic statistics over the matches of a session.

    Parameters
    ----------
    registry:
        Optional content registry used to label cards with their owning
        champion.
    """

    def __init__(self, registry: ContentRegistry | None = None) -> None:
        self.registry = registry
        self.counters = GlobalCounters()
        self.cards: dict[str, CardStats] = {}
        self.champions: dict[str, ChampionStats] = {}
        self.pairs: dict[str, PairStats] = {}
        self.matchups: dict[str, MatchupStats] = {}

    # ------------------------------------------------------------------
    # Lazy entry creation
    # ------------------------------------------------------------------

    def card(self, card_id: str) -> CardStats:
        stats = self.cards.get(card_id)
        if stats is None:
            champion = ""
            if self.registry is not None:
                definition = self.registry.get_card(card_id)
                if definition is not None:
                    champion = definition.champion
            stats = self.cards[card_id] = CardStats(card_id=card_id, champion=champion)
        return stats

    def champion(self, name: str) -> ChampionStats:
        stats = self.champions.get(name)
        if stats is None:
            stats = self.champions[name] = ChampionStats(name=name)
        return stats

    def pair(self, roster: list[str]) -> PairStats:
        key = pair_key(roster)
        stats = self.pairs.get(key)
        if stats is None:
            stats = self.pairs[key] = PairStats(key=key, champions=sorted(roster))
        return stats

    def matchup(self, roster_a: list[str], roster_b: list[str]) -> tuple[MatchupStats, bool]:
        key, flipped = matchup_key(roster_a, roster_b)
        stats = self.matchups.get(key)
        if stats is None:
            left, right = key.split(" vs ")
            stats = self.matchups[key] = MatchupStats(key=key, pair_a=left, pair_b=right)
        return stats, flipped

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def begin_match(self, roster_a: list[str], roster_b: list[str]) -> None:
        """Register the picks of a match before it runs."""
        self.counters.matches_attempted += 1
        for roster in (roster_a, roster_b):
            for name in roster:
                self.champion(name).picks += 1
            if roster:
                self.pair(roster).picks += 1

    def record_match_result(self, result: MatchResult) -> None:
        """Fold one match result into the running statistics.

        Failed matches only update the failure and error counters.
        """
        counters = self.counters
        counters.errors += len(result.errors)
        counters.warnings += len(result.warnings)
        if result.failed:
            counters.matches_failed += 1
            return

        config = result.config
        winner = result.winner
        counters.matches_completed += 1
        if winner == 1:
            counters.player1_wins += 1
        elif winner == 2:
            counters.player2_wins += 1
        else:
            counters.draws += 1

        if result.win_reason in (WinReason.ELIMINATION, WinReason.MUTUAL_ELIMINATION):
            counters.eliminations += 1
        elif result.win_reason == WinReason.STALEMATE:
            counters.stalemates += 1
        elif result.win_reason in (WinReason.ROUND_LIMIT_HP, WinReason.ROUND_LIMIT_TIE):
            counters.round_limit_finishes += 1
        counters.total_rounds += result.total_rounds
        counters.total_turns += result.total_turns
        counters.total_actions += result.total_actions

        self._record_champions(result)
        for player, roster in ((1, config.roster_a), (2, config.roster_b)):
            pair = self.pair(roster)
            pair.matches += 1
            self._bump_outcome(pair, _side_outcome(winner, player))

        matchup, flipped = self.matchup(config.roster_a, config.roster_b)
        matchup.matches += 1
        if winner == 0:
            matchup.draws += 1
        elif (winner == 1) != flipped:
            matchup.pair_a_wins += 1
        else:
            matchup.pair_b_wins += 1

        self._record_card_plays(result)

        for card_id, count in result.cards_drawn.items():
            self.record_card_drawn(card_id, count)
        for card_id, count in result.cards_discarded.items():
            self.record_card_discarded(card_id, count)
        for card_id, count in result.cards_held.items():
            self.record_card_held(card_id, count)

    def record_card_drawn(self, card_id: str, count: int = 1) -> None:
        self.card(card_id).draws += count

    def record_card_discarded(self, card_id: str, count: int = 1) -> None:
        """Record hand-limit discards."""
        self.card(card_id).hand_limit_discards += count

    def record_card_held(self, card_id: str, count: int = 1) -> None:
        self.card(card_id).held_at_end += count

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> StatisticsAggregator:
        """Return a deep copy that later recording does not affect."""
        copy = StatisticsAggregator(self.registry)
        copy.counters = self.counters.model_copy(deep=True)
        copy.cards = {k: v.model_copy(deep=True) for k, v in self.cards.items()}
        copy.champions = {k: v.model_copy(deep=True) for k, v in self.champions.items()}
        copy.pairs = {k: v.model_copy(deep=True) for k, v in self.pairs.items()}
        copy.matchups = {k: v.model_copy(deep=True) for k, v in self.matchups.items()}
        return copy

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _record_champions(self, result: MatchResult) -> None:
        config = result.config
        for player, roster in ((1, config.roster_a), (2, config.roster_b)):
            outcome = _side_outcome(result.winner, player)
            for name in roster:
                stats = self.champion(name)
                stats.matches += 1
                self._bump_outcome(stats, outcome)
                if result.final_hp.get(name, 0) > 0:
                    stats.survived += 1
                else:
                    stats.deaths += 1

        for death in result.deaths:
            if death.killer is not None:
                self.champion(death.killer).kills += 1
        for step in result.actions:
            if step.damage_dealt <= 0:
                continue
            actor = getattr(step.action, "champion", None) or getattr(step.action, "caster", None)
            if actor is not None:
                self.champion(actor).damage_dealt += step.damage_dealt

    def _record_card_plays(self, result: MatchResult) -> None:
        played: set[tuple[str, int]] = set()
        for record in result.card_plays:
            stats = self.card(record.card_id)
            if not stats.champion:
                stats.champion = record.caster
            outcome = _side_outcome(result.winner, record.player)
            stats.plays += 1
            if outcome == _WIN:
                stats.plays_in_wins += 1
            elif outcome == _LOSS:
                stats.plays_in_losses += 1
            else:
                stats.plays_in_draws += 1

            effect = record.outcome
            stats.damage += effect.damage
            stats.heal += effect.heal
            stats.buff += effect.buff
            stats.debuff += effect.debuff
            stats.movement += effect.movement
            stats.draw += effect.draw
            stats.mana += effect.mana
            if effect.is_noop:
                stats.noop_plays += 1
                reason = effect.noop_reason or "unknown reason"
                stats.noop_reasons[reason] = stats.noop_reasons.get(reason, 0) + 1
                self.counters.total_noop_plays += 1
            self.counters.total_card_plays += 1
            played.add((record.card_id, record.player))

        for card_id, player in sorted(played):
            stats = self.card(card_id)
            stats.matches_played_in += 1
            outcome = _side_outcome(result.winner, player)
            if outcome == _WIN:
                stats.wins_when_played += 1
            elif outcome == _LOSS:
                stats.losses_when_played += 1
            else:
                stats.draws_when_played += 1

    @staticmethod
    def _bump_outcome(stats: ChampionStats | PairStats, outcome: str) -> None:
        if outcome == _WIN:
            stats.wins += 1
        elif outcome == _LOSS:
            stats.losses += 1
        else:
            stats.draws += 1
