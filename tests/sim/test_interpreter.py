"""Tests for the effect resolver and the events it publishes."""

from __future__ import annotations

import pytest

from tactics_sim.ir.effects import Stat
from tactics_sim.sim.engine.board import distance
from tactics_sim.sim.engine.events import EffectEvent, EffectEventKind


@pytest.fixture
def events(engine) -> list[EffectEvent]:
    seen: list[EffectEvent] = []
    engine.subscribe(seen.append)
    return seen


def _resolve(engine, card_id: str, caster: str, targets: list[str]) -> int:
    state = engine.state
    card = engine.registry.get_card(card_id)
    return engine.resolver.resolve(
        card, state, state.champions[caster], [state.champions[t] for t in targets],
    )


# ---------------------------------------------------------------------------
# Damage and healing
# ---------------------------------------------------------------------------

class TestDamage:
    def test_spell_damage_ignores_defense(self, engine, events):
        dealt = _resolve(engine, "arcane_bolt", "Shaman", ["Brute"])
        assert dealt == 4
        assert engine.state.champions["Brute"].current_hp == 26
        assert events == [EffectEvent(EffectEventKind.DAMAGE, "Shaman", "Brute", 4)]

    def test_damage_to_each_target(self, engine, events):
        dealt = _resolve(engine, "volley", "Ranger", ["Brute", "Beast"])
        assert dealt == 4
        assert len(events) == 2
        assert {e.target for e in events} == {"Brute", "Beast"}

    def test_dead_targets_are_skipped(self, engine, events):
        engine.state.champions["Brute"].current_hp = 0
        assert _resolve(engine, "arcane_bolt", "Shaman", ["Brute"]) == 0
        assert events == []


class TestHeal:
    def test_heal_publishes_restored_amount(self, engine, events):
        engine.state.champions["Shaman"].current_hp = 20
        _resolve(engine, "mend", "Shaman", ["Shaman"])
        assert engine.state.champions["Shaman"].current_hp == 22
        assert [e.amount for e in events] == [2]

    def test_heal_at_full_hp_is_silent(self, engine, events):
        _resolve(engine, "mend", "Shaman", ["Shaman"])
        assert events == []


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------

class TestModifiers:
    def test_buff_adds_temporary_modifier(self, engine, events):
        _resolve(engine, "ward", "Shaman", ["Ranger"])
        ranger = engine.state.champions["Ranger"]
        assert ranger.effective(Stat.DEFENSE) == 2
        assert ranger.modifiers[0].source == "ward"
        assert events[0].kind == EffectEventKind.BUFF

    def test_debuff_is_negative_modifier(self, engine, events):
        _resolve(engine, "hex", "Shaman", ["Brute"])
        assert engine.state.champions["Brute"].effective(Stat.DEFENSE) == 1
        assert events[0].kind == EffectEventKind.DEBUFF
        assert events[0].amount == 1

    def test_stat_mod_is_silent(self, engine, events):
        _resolve(engine, "hawk_eye", "Ranger", ["Ranger"])
        assert engine.state.champions["Ranger"].stat_mods[Stat.RANGE] == 1
        assert events == []


# ---------------------------------------------------------------------------
# Movement
# ---------------------------------------------------------------------------

class TestMovement:
    def test_self_move_toward_stops_adjacent(self, engine, events):
        engine.state.champions["Ranger"].position = (4, 3)
        _resolve(engine, "pounce", "Beast", ["Beast"])
        beast = engine.state.champions["Beast"]
        assert beast.position == (4, 4)
        assert distance(beast.position, (4, 3)) == 1
        assert events[0].kind == EffectEventKind.MOVEMENT
        assert events[0].amount == 2

    def test_push_away_from_caster(self, engine, events):
        engine.state.champions["Brute"].position = (3, 3)
        engine.state.champions["Ranger"].position = (3, 2)
        _resolve(engine, "shield_bash", "Ranger", ["Brute"])
        brute = engine.state.champions["Brute"]
        assert distance(brute.position, (3, 2)) == 2
        assert [e.kind for e in events] == [EffectEventKind.DAMAGE, EffectEventKind.MOVEMENT]

    def test_blocked_move_is_silent(self, engine, events):
        # Ranger boxed into the corner by allies and an enemy.
        state = engine.state
        state.champions["Ranger"].position = (0, 0)
        state.champions["Shaman"].position = (1, 0)
        state.champions["Brute"].position = (0, 1)
        _resolve(engine, "fall_back", "Ranger", ["Ranger"])
        assert state.champions["Ranger"].position == (0, 0)
        assert events == []


# ---------------------------------------------------------------------------
# Cast-scoped effects
# ---------------------------------------------------------------------------

class TestCastScoped:
    def test_draw_publishes_generic_event(self, engine, events):
        piles = engine.state.players[1].piles
        before = piles.hand_size
        _resolve(engine, "quick_draw", "Ranger", [])
        assert piles.hand_size == before + 2
        assert events == [
            EffectEvent(EffectEventKind.EFFECT_APPLIED, "Ranger", None, 2, category="draw"),
        ]

    def test_mana_grant_is_silent(self, engine, events):
        _resolve(engine, "spirit_link", "Shaman", [])
        assert engine.state.players[1].mana == 5
        assert events == []

    def test_mana_steal_locks_opponent(self, engine, events):
        _resolve(engine, "mana_drain", "Ranger", [])
        state = engine.state
        assert state.players[1].mana == 4
        assert state.players[2].mana_locked == 1

    def test_empty_card_does_nothing(self, engine, events):
        assert _resolve(engine, "void_whisper", "Ranger", []) == 0
        assert events == []
