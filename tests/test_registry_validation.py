"""Validate the bundled content: every champion's deck resolves to its own cards."""

from __future__ import annotations

import pytest

from tactics_sim.ir.cards import CardDefinition, CardTarget, CardType
from tactics_sim.ir.champions import ChampionDefinition
from tactics_sim.ir.effects import DamageEffect, HealEffect
from tactics_sim.sim.content.registry import ContentRegistry


class TestBundledContent:
    def test_no_cross_reference_problems(self, registry):
        assert registry.validate() == []

    def test_eight_champions(self, registry):
        names = registry.list_champion_names()
        assert names == sorted(names)
        assert len(names) == 8

    def test_every_champion_has_a_deck(self, registry):
        for name in registry.list_champion_names():
            assert len(registry.get_champion_deck(name)) >= 6

    def test_effects_are_typed(self, registry):
        assert isinstance(registry.get_card("smash").effects[0], DamageEffect)
        assert isinstance(registry.get_card("mend").effects[0], HealEffect)

    def test_response_cards(self, registry):
        responses = sorted(c.id for c in registry.cards.values() if c.type == CardType.RESPONSE)
        assert responses == ["parry", "ward"]

    def test_unknown_lookups(self, registry):
        assert registry.get_card("nope") is None
        assert registry.get_champion("Nobody") is None
        with pytest.raises(KeyError):
            registry.get_champion_deck("Nobody")


class TestValidation:
    def test_reports_unknown_and_foreign_cards(self):
        reg = ContentRegistry()
        reg.add_card(CardDefinition(
            id="smash", name="Smash", champion="Brute", cost=2, target=CardTarget.ENEMY,
        ))
        reg.add_champion(ChampionDefinition(
            name="Beast", max_hp=28, attack=5, defense=1, move=3, range=1,
            cards=["smash", "missing"],
        ))
        problems = reg.validate()
        assert len(problems) == 2
        assert any("missing" in p for p in problems)
        assert any("belongs to 'Brute'" in p for p in problems)

    def test_load_from_custom_file(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text(
            '[{"_section": "Test"},'
            ' {"id": "zap", "name": "Zap", "champion": "Mystic", "cost": 1, "target": "ENEMY",'
            '  "effects": [{"kind": "damage", "amount": 3}]}]'
        )
        reg = ContentRegistry()
        reg.load_cards(path)
        assert list(reg.cards) == ["zap"]
        assert reg.get_card("zap").range is None
