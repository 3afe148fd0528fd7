"""Tests for the reference SkirmishEngine rules."""

from __future__ import annotations

import pytest

from tactics_sim.ir.effects import Stat
from tactics_sim.sim.core.game_state import CardInstance, MatchPhase
from tactics_sim.sim.core.rng import GameRNG
from tactics_sim.sim.engine.skirmish import HAND_LIMIT, OPENING_HAND, SkirmishEngine


def _give_card(engine: SkirmishEngine, player: int, card_id: str, champion: str) -> str:
    instance_id = f"test-{card_id}"
    engine.state.players[player].piles.hand.append(
        CardInstance(id=instance_id, card_id=card_id, champion=champion)
    )
    return instance_id


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

class TestInitialize:
    def test_deploys_rosters(self, engine):
        state = engine.state
        assert state.champions["Ranger"].position == (2, 0)
        assert state.champions["Shaman"].position == (4, 0)
        assert state.champions["Brute"].position == (2, 6)
        assert state.champions["Beast"].owner == 2

    def test_opening_hands_and_first_turn(self, engine):
        state = engine.state
        for player in (1, 2):
            assert state.players[player].piles.hand_size == OPENING_HAND
        assert state.active_player == 1
        assert state.round == 1
        assert state.turn == 1
        assert state.players[1].mana == 3
        assert state.phase == MatchPhase.MAIN

    def test_instance_ids_are_unique_per_player(self, engine):
        piles = engine.state.players[1].piles
        ids = [c.id for c in piles.hand + piles.deck]
        assert len(ids) == 14
        assert len(set(ids)) == 14
        assert all(i.startswith("p1-") for i in ids)

    def test_same_seed_same_opening_hand(self, registry):
        hands = []
        for _ in range(2):
            eng = SkirmishEngine(registry, GameRNG(7))
            eng.initialize(["Ranger", "Shaman"], ["Brute", "Beast"])
            hands.append([c.id for c in eng.state.players[1].piles.hand])
        assert hands[0] == hands[1]

    @pytest.mark.parametrize("roster_a, roster_b", [
        (["Brute", "Ranger"], ["Brute", "Shaman"]),
        (["Brute"], ["Beast", "Shaman"]),
        (["Brute", "Nobody"], ["Beast", "Shaman"]),
    ])
    def test_rejects_bad_rosters(self, registry, roster_a, roster_b):
        eng = SkirmishEngine(registry, GameRNG(1))
        assert eng.initialize(roster_a, roster_b) is False


# ---------------------------------------------------------------------------
# Movement and attacks
# ---------------------------------------------------------------------------

class TestMoveAndAttack:
    def test_move_once_per_turn(self, engine):
        assert engine.move("Ranger", (2, 3))
        assert engine.state.champions["Ranger"].position == (2, 3)
        assert engine.reachable_tiles("Ranger") == []
        assert not engine.move("Ranger", (2, 2))

    def test_cannot_move_onto_ally(self, engine):
        assert (4, 0) not in engine.reachable_tiles("Ranger")
        assert not engine.move("Ranger", (4, 0))

    def test_inactive_player_cannot_act(self, engine):
        assert engine.reachable_tiles("Brute") == []
        assert engine.attack_targets("Brute") == []

    def test_attack_in_range(self, engine):
        engine.state.champions["Brute"].position = (2, 3)
        assert engine.attack_targets("Ranger") == ["Brute"]
        assert engine.attack_targets("Shaman") == []
        outcome = engine.attack("Ranger", "Brute")
        assert outcome.success
        assert outcome.damage == 2  # 4 attack - 2 defense
        assert engine.state.champions["Brute"].current_hp == 28

    def test_attack_once_per_turn(self, engine):
        engine.state.champions["Brute"].position = (2, 3)
        engine.attack("Ranger", "Brute")
        assert not engine.attack("Ranger", "Brute").success

    def test_minimum_damage_is_one(self, engine):
        engine.state.champions["Brute"].position = (4, 1)
        outcome = engine.attack("Shaman", "Brute")
        assert outcome.damage == 1

    def test_out_of_range_attack_rejected(self, engine):
        outcome = engine.attack("Ranger", "Brute")
        assert not outcome.success
        assert engine.state.champions["Brute"].current_hp == 30


# ---------------------------------------------------------------------------
# Casting
# ---------------------------------------------------------------------------

class TestCast:
    def test_cast_spends_mana_and_discards(self, engine):
        engine.state.champions["Shaman"].current_hp = 15
        instance_id = _give_card(engine, 1, "mend", "Shaman")
        assert engine.cast(1, instance_id, ("Shaman",))
        piles = engine.state.players[1].piles
        assert engine.state.champions["Shaman"].current_hp == 19
        assert engine.state.players[1].mana == 2
        assert piles.find_in_hand(instance_id) is None
        assert piles.discard[-1].id == instance_id

    def test_wrong_targets_rejected_without_side_effects(self, engine):
        instance_id = _give_card(engine, 1, "mend", "Shaman")
        assert not engine.cast(1, instance_id, ("Ranger",))
        assert engine.state.players[1].mana == 3
        assert engine.state.players[1].piles.find_in_hand(instance_id) is not None

    def test_unaffordable_card(self, engine):
        instance_id = _give_card(engine, 1, "aimed_shot", "Ranger")
        engine.state.players[1].mana = 2
        assert not engine.can_cast(1, instance_id)

    def test_inactive_player_cannot_cast_action(self, engine):
        instance_id = _give_card(engine, 2, "frenzy", "Beast")
        engine.state.players[2].mana = 3
        assert not engine.can_cast(2, instance_id)

    def test_response_card_not_castable_outside_window(self, engine):
        instance_id = _give_card(engine, 1, "ward", "Shaman")
        assert not engine.can_cast(1, instance_id)

    def test_all_enemies_targets_in_range_only(self, engine):
        volley = engine.registry.get_card("volley")
        engine.state.champions["Brute"].position = (2, 4)
        assert engine.cast_targets(volley, "Ranger") == [("Brute",)]

    def test_none_target_card_has_empty_target_set(self, engine):
        assert engine.cast_targets(engine.registry.get_card("spirit_link"), "Shaman") == [()]

    def test_stat_mod_applies(self, engine):
        instance_id = _give_card(engine, 1, "hawk_eye", "Ranger")
        assert engine.cast(1, instance_id, ("Ranger",))
        assert engine.state.champions["Ranger"].effective(Stat.RANGE) == 4


# ---------------------------------------------------------------------------
# Response window
# ---------------------------------------------------------------------------

class TestResponseWindow:
    def test_window_opens_for_waiting_player_with_response(self, engine):
        ward = _give_card(engine, 1, "ward", "Shaman")
        engine.start_turn(2, 1)
        assert engine.response_window_open()
        assert engine.priority_player() == 1
        assert engine.state.phase == MatchPhase.RESPONSE
        assert engine.can_cast(1, ward)
        assert engine.reachable_tiles("Brute") == []

    def test_response_cast_inside_window(self, engine):
        ward = _give_card(engine, 1, "ward", "Shaman")
        engine.start_turn(2, 1)
        assert engine.cast(1, ward, ("Ranger",))
        assert engine.state.champions["Ranger"].effective(Stat.DEFENSE) == 2

    def test_window_closes_after_all_pass(self, engine):
        _give_card(engine, 1, "ward", "Shaman")
        engine.start_turn(2, 1)
        assert engine.pass_priority()
        assert engine.priority_player() == 2
        assert engine.pass_priority()
        assert not engine.response_window_open()
        assert engine.state.phase == MatchPhase.MAIN
        assert engine.reachable_tiles("Brute") != []

    def test_pass_without_window(self, engine):
        assert engine.pass_priority() is False


# ---------------------------------------------------------------------------
# Turn primitives and win condition
# ---------------------------------------------------------------------------

class TestTurnPrimitives:
    @pytest.mark.parametrize("round_number, mana", [(1, 3), (2, 4), (4, 6), (10, 6)])
    def test_mana_ramp(self, engine, round_number, mana):
        engine.start_turn(1, round_number)
        assert engine.state.players[1].mana == mana

    def test_mana_lock_reduces_next_refill(self, engine):
        engine.state.players[1].mana_locked = 2
        engine.start_turn(1, 1)
        assert engine.state.players[1].mana == 1
        assert engine.state.players[1].mana_locked == 0

    def test_start_turn_resets_flags(self, engine):
        engine.move("Ranger", (2, 2))
        engine.start_turn(1, 2)
        assert engine.reachable_tiles("Ranger") != []

    def test_discard_unknown_card_raises(self, engine):
        with pytest.raises(ValueError):
            engine.discard_from_hand(1, "missing")

    def test_hand_limit(self, engine):
        assert engine.hand_limit == HAND_LIMIT

    def test_winner_when_side_eliminated(self, engine):
        assert engine.check_winner() is None
        engine.state.champions["Beast"].current_hp = 0
        engine.state.champions["Brute"].current_hp = 2
        engine.state.champions["Brute"].position = (2, 3)
        engine.attack("Ranger", "Brute")
        assert engine.check_winner() == 1
        assert engine.state.phase == MatchPhase.ENDED
        assert engine.reachable_tiles("Shaman") == []

    def test_mutual_elimination(self, engine):
        for champion in engine.state.champions.values():
            champion.current_hp = 0
        assert engine.check_winner() == 0
