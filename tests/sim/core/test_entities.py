"""Tests for Champion and StatModifier."""

from __future__ import annotations

from tactics_sim.ir.effects import Stat
from tactics_sim.sim.core.entities import Champion, StatModifier


def _make_champion(**overrides) -> Champion:
    values = dict(
        name="Brute", owner=1, max_hp=30, current_hp=30,
        attack=5, defense=2, move=2, range=1, position=(2, 0),
    )
    values.update(overrides)
    return Champion(**values)


# ---------------------------------------------------------------------------
# Damage and healing
# ---------------------------------------------------------------------------

class TestDamageAndHeal:
    def test_take_damage_returns_hp_lost(self):
        c = _make_champion()
        assert c.take_damage(7) == 7
        assert c.current_hp == 23

    def test_overkill_is_capped(self):
        c = _make_champion(current_hp=3)
        assert c.take_damage(10) == 3
        assert c.current_hp == 0
        assert c.is_dead

    def test_dead_champion_takes_no_damage(self):
        c = _make_champion(current_hp=0)
        assert c.take_damage(5) == 0

    def test_heal_capped_at_max(self):
        c = _make_champion(current_hp=28)
        assert c.heal(5) == 2
        assert c.is_full_hp

    def test_heal_at_full_hp_restores_nothing(self):
        assert _make_champion().heal(4) == 0


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------

class TestModifiers:
    def test_effective_includes_permanent_and_temporary(self):
        c = _make_champion()
        c.stat_mods[Stat.ATTACK] = 1
        c.add_modifier(StatModifier(stat=Stat.ATTACK, amount=2, turns_remaining=1))
        assert c.effective(Stat.ATTACK) == 8

    def test_debuff_floors_at_zero(self):
        c = _make_champion()
        c.add_modifier(StatModifier(stat=Stat.DEFENSE, amount=-5, turns_remaining=1))
        assert c.effective(Stat.DEFENSE) == 0

    def test_range_floors_at_one(self):
        c = _make_champion()
        c.add_modifier(StatModifier(stat=Stat.RANGE, amount=-3, turns_remaining=1))
        assert c.effective(Stat.RANGE) == 1

    def test_tick_expires_modifiers(self):
        c = _make_champion()
        c.add_modifier(StatModifier(stat=Stat.ATTACK, amount=2, turns_remaining=1))
        c.add_modifier(StatModifier(stat=Stat.MOVE, amount=-1, turns_remaining=2))
        assert c.tick_modifiers() == 1
        assert len(c.modifiers) == 1
        assert c.debuffs[0].stat == Stat.MOVE
        assert c.tick_modifiers() == 1
        assert c.modifiers == []

    def test_reset_turn_flags(self):
        c = _make_champion(has_moved=True, has_attacked=True)
        c.reset_turn_flags()
        assert not c.has_moved
        assert not c.has_attacked
