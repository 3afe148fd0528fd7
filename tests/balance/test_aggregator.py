"""Tests for StatisticsAggregator."""

from __future__ import annotations

from tactics_sim.balance.aggregator import StatisticsAggregator
from tactics_sim.sim.actions import AttackAction, CastAction
from tactics_sim.sim.config import MatchConfig
from tactics_sim.sim.telemetry import (
    CardPlayRecord,
    DeathRecord,
    EffectOutcome,
    MatchResult,
    MatchStatus,
    ReplayAction,
    RoundSummary,
    WinReason,
)


def _make_result(
    winner: int = 1,
    roster_a=("Ranger", "Brute"),
    roster_b=("Shaman", "Beast"),
    win_reason: str = WinReason.ELIMINATION,
    **kwargs,
) -> MatchResult:
    config = MatchConfig(index=0, roster_a=list(roster_a), roster_b=list(roster_b))
    result = MatchResult(config=config, seed_used=1, winner=winner, win_reason=win_reason, **kwargs)
    if not result.final_hp:
        result.final_hp = {name: 10 for name in list(roster_a) + list(roster_b)}
    return result


def _make_play(card_id: str, player: int, caster: str, **outcome) -> CardPlayRecord:
    return CardPlayRecord(
        card_id=card_id, card_name=card_id.title(), caster=caster, player=player,
        round=1, turn=1, mana_cost=1, mana_available=3, targets=(),
        outcome=EffectOutcome(**outcome),
    )


# ---------------------------------------------------------------------------
# Global counters
# ---------------------------------------------------------------------------

class TestGlobalCounters:
    def test_begin_match_counts_picks(self):
        agg = StatisticsAggregator()
        agg.begin_match(["Ranger", "Brute"], ["Shaman", "Beast"])
        assert agg.counters.matches_attempted == 1
        assert agg.champion("Ranger").picks == 1
        assert agg.pair(["Brute", "Ranger"]).picks == 1

    def test_outcomes_are_conserved(self):
        agg = StatisticsAggregator()
        for winner in (1, 2, 0, 1):
            agg.record_match_result(_make_result(winner=winner))
        c = agg.counters
        assert (c.player1_wins, c.player2_wins, c.draws) == (2, 1, 1)
        assert c.player1_wins + c.player2_wins + c.draws == c.matches_completed

    def test_failed_match_only_counts_failure(self):
        agg = StatisticsAggregator()
        failed = _make_result(winner=0, win_reason=WinReason.SETUP_FAILED)
        failed.status = MatchStatus.FAILED
        failed.errors.append("bad roster")
        agg.record_match_result(failed)
        assert agg.counters.matches_failed == 1
        assert agg.counters.matches_completed == 0
        assert agg.counters.draws == 0
        assert agg.counters.errors == 1
        assert agg.champions == {}

    def test_ending_counters(self):
        agg = StatisticsAggregator()
        agg.record_match_result(_make_result(win_reason=WinReason.ELIMINATION))
        agg.record_match_result(_make_result(winner=0, win_reason=WinReason.STALEMATE))
        agg.record_match_result(_make_result(winner=0, win_reason=WinReason.ROUND_LIMIT_TIE))
        c = agg.counters
        assert (c.eliminations, c.stalemates, c.round_limit_finishes) == (1, 1, 1)

    def test_round_totals(self):
        agg = StatisticsAggregator()
        agg.record_match_result(_make_result(total_rounds=4))
        agg.record_match_result(_make_result(total_rounds=6))
        assert agg.counters.avg_rounds == 5.0


# ---------------------------------------------------------------------------
# Champions, pairs and matchups
# ---------------------------------------------------------------------------

class TestChampionStats:
    def test_wins_and_losses(self):
        agg = StatisticsAggregator()
        agg.record_match_result(_make_result(winner=1))
        assert agg.champion("Ranger").wins == 1
        assert agg.champion("Shaman").losses == 1
        assert agg.champion("Beast").win_rate == 0.0

    def test_survival_and_deaths(self):
        agg = StatisticsAggregator()
        agg.record_match_result(_make_result(
            final_hp={"Ranger": 5, "Brute": 0, "Shaman": 0, "Beast": 0},
        ))
        assert agg.champion("Ranger").survived == 1
        assert agg.champion("Brute").deaths == 1

    def test_kills_from_death_records(self):
        agg = StatisticsAggregator()
        summary = RoundSummary(round=1, deaths=[
            DeathRecord(champion="Beast", owner=2, round=1, turn=1, killer="Ranger"),
            DeathRecord(champion="Shaman", owner=2, round=1, turn=1, killer=None),
        ])
        agg.record_match_result(_make_result(rounds=[summary]))
        assert agg.champion("Ranger").kills == 1

    def test_damage_dealt_from_actions(self):
        agg = StatisticsAggregator()
        actions = [
            ReplayAction(index=0, round=1, turn=1, player=1,
                         action=AttackAction(champion="Brute", target="Beast"), damage_dealt=4),
            ReplayAction(index=1, round=1, turn=1, player=1,
                         action=CastAction(card_instance="p1-00", card_id="volley", caster="Ranger"),
                         damage_dealt=2),
        ]
        agg.record_match_result(_make_result(actions=actions))
        assert agg.champion("Brute").damage_dealt == 4
        assert agg.champion("Ranger").damage_dealt == 2


class TestPairsAndMatchups:
    def test_pair_keys_ignore_order(self):
        agg = StatisticsAggregator()
        agg.record_match_result(_make_result(roster_a=("Ranger", "Brute")))
        agg.record_match_result(_make_result(roster_a=("Brute", "Ranger")))
        assert agg.pairs["Brute+Ranger"].matches == 2
        assert agg.pairs["Brute+Ranger"].wins == 2

    def test_matchup_canonical_orientation(self):
        agg = StatisticsAggregator()
        # Brute+Ranger sorts after Beast+Shaman, so it is the right-hand pair.
        agg.record_match_result(_make_result(winner=1))
        agg.record_match_result(_make_result(winner=2, roster_a=("Shaman", "Beast"), roster_b=("Ranger", "Brute")))
        agg.record_match_result(_make_result(winner=0))
        m = agg.matchups["Beast+Shaman vs Brute+Ranger"]
        assert m.pair_a == "Beast+Shaman"
        assert m.pair_b_wins == 2
        assert m.pair_a_wins == 0
        assert m.draws == 1
        assert m.matches == 3


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------

class TestCardStats:
    def test_play_counts_and_effects(self):
        agg = StatisticsAggregator()
        plays = [
            _make_play("volley", 1, "Ranger", damage=4),
            _make_play("volley", 1, "Ranger", is_noop=True, noop_reason="no valid targets"),
            _make_play("mend", 2, "Shaman", heal=3),
        ]
        agg.record_match_result(_make_result(winner=1, card_plays=plays))
        volley = agg.card("volley")
        assert volley.plays == 2
        assert volley.plays_in_wins == 2
        assert volley.damage == 4
        assert volley.noop_plays == 1
        assert volley.noop_reasons == {"no valid targets": 1}
        assert agg.card("mend").plays_in_losses == 1
        assert agg.counters.total_card_plays == 3
        assert agg.counters.total_noop_plays == 1

    def test_win_correlation_counts_matches_once(self):
        agg = StatisticsAggregator()
        plays = [_make_play("volley", 1, "Ranger"), _make_play("volley", 1, "Ranger")]
        agg.record_match_result(_make_result(winner=1, card_plays=plays))
        agg.record_match_result(_make_result(winner=2, card_plays=plays[:1]))
        volley = agg.card("volley")
        assert volley.matches_played_in == 2
        assert volley.wins_when_played == 1
        assert volley.losses_when_played == 1
        assert volley.win_rate_when_played == 0.5

    def test_usage_counters(self):
        agg = StatisticsAggregator()
        agg.record_match_result(_make_result(
            cards_drawn={"mend": 4}, cards_discarded={"mend": 1}, cards_held={"mend": 2},
        ))
        mend = agg.card("mend")
        assert (mend.draws, mend.hand_limit_discards, mend.held_at_end) == (4, 1, 2)
        assert mend.discard_rate == 0.25

    def test_registry_labels_owner(self, registry):
        agg = StatisticsAggregator(registry)
        assert agg.card("mend").champion == "Shaman"


class TestSnapshot:
    def test_snapshot_is_independent(self):
        agg = StatisticsAggregator()
        agg.record_match_result(_make_result())
        snap = agg.snapshot()
        agg.record_match_result(_make_result())
        assert snap.counters.matches_completed == 1
        assert snap.champion("Ranger").matches == 1
        assert agg.counters.matches_completed == 2
