"""Tests for effect instrumentation and no-op classification."""

from __future__ import annotations

import logging

from tactics_sim.sim.core.game_state import CardInstance
from tactics_sim.sim.instrumentation import EffectInstrumentation
from tactics_sim.sim.telemetry import EffectOutcome, NoOpReason


def _tracked_cast(engine, card_id: str, champion: str, targets: tuple[str, ...]) -> EffectOutcome:
    """Put *card_id* in player 1's hand, cast it inside a tracking window."""
    instance_id = f"test-{card_id}"
    engine.state.players[1].piles.hand.append(
        CardInstance(id=instance_id, card_id=card_id, champion=champion)
    )
    engine.state.players[1].mana = 6
    card = engine.registry.get_card(card_id)
    instrumentation = EffectInstrumentation(engine)
    with instrumentation.begin(card, champion, 1, targets) as window:
        assert engine.cast(1, instance_id, targets)
        return window.end()


# ---------------------------------------------------------------------------
# Impactful plays
# ---------------------------------------------------------------------------

class TestImpactfulPlays:
    def test_damage_accumulates_per_target(self, engine):
        engine.state.champions["Brute"].position = (2, 4)
        engine.state.champions["Beast"].position = (3, 3)
        outcome = _tracked_cast(engine, "volley", "Ranger", ("Brute", "Beast"))
        assert outcome.damage == 4
        assert outcome.targets_hit == ["Brute", "Beast"]
        assert not outcome.is_noop

    def test_heal_on_damaged_target(self, engine):
        engine.state.champions["Shaman"].current_hp = 10
        outcome = _tracked_cast(engine, "mend", "Shaman", ("Shaman",))
        assert outcome.heal == 4
        assert not outcome.is_noop
        assert outcome.noop_reason is None

    def test_draw_counts_cards(self, engine):
        outcome = _tracked_cast(engine, "quick_draw", "Ranger", ())
        assert outcome.draw == 2
        assert outcome.targets_hit == []

    def test_silent_stat_mod_is_never_noop(self, engine):
        outcome = _tracked_cast(engine, "hawk_eye", "Ranger", ("Ranger",))
        assert outcome.total == 0
        assert not outcome.is_noop

    def test_silent_mana_grant_is_never_noop(self, engine):
        outcome = _tracked_cast(engine, "spirit_link", "Shaman", ())
        assert outcome.total == 0
        assert not outcome.is_noop


# ---------------------------------------------------------------------------
# No-op plays
# ---------------------------------------------------------------------------

class TestNoOpPlays:
    def test_heal_at_full_hp(self, engine):
        outcome = _tracked_cast(engine, "mend", "Shaman", ("Shaman",))
        assert outcome.is_noop
        assert outcome.noop_reason == NoOpReason.TARGET_FULL_HP

    def test_damage_with_no_enemy_in_range(self, engine):
        outcome = _tracked_cast(engine, "volley", "Ranger", ())
        assert outcome.is_noop
        assert outcome.noop_reason == NoOpReason.NO_VALID_TARGETS

    def test_card_without_effects(self, engine):
        outcome = _tracked_cast(engine, "void_whisper", "Ranger", ())
        assert outcome.is_noop
        assert outcome.noop_reason == NoOpReason.UNKNOWN

    def test_draw_with_nothing_to_draw(self, engine):
        piles = engine.state.players[1].piles
        piles.deck = []
        piles.discard = []
        card = engine.registry.get_card("quick_draw")
        window = EffectInstrumentation(engine).begin(card, "Ranger", 1)
        outcome = window.end()
        assert outcome.is_noop
        assert outcome.noop_reason == NoOpReason.DECK_EMPTY


# ---------------------------------------------------------------------------
# Window lifecycle
# ---------------------------------------------------------------------------

class TestWindowLifecycle:
    def test_listener_detached_after_with_block(self, engine):
        card = engine.registry.get_card("mend")
        instrumentation = EffectInstrumentation(engine)
        with instrumentation.begin(card, "Shaman", 1, ("Shaman",)) as window:
            assert window.active
            assert engine.bus.listener_count == 1
        assert engine.bus.listener_count == 0
        assert instrumentation.current is None

    def test_events_after_end_are_ignored(self, engine):
        card = engine.registry.get_card("arcane_bolt")
        window = EffectInstrumentation(engine).begin(card, "Shaman", 1, ("Brute",))
        outcome = window.end()
        state = engine.state
        engine.resolver.resolve(card, state, state.champions["Shaman"], [state.champions["Brute"]])
        assert outcome.damage == 0

    def test_stale_window_is_discarded(self, engine, caplog):
        card = engine.registry.get_card("mend")
        instrumentation = EffectInstrumentation(engine)
        first = instrumentation.begin(card, "Shaman", 1, ("Shaman",))
        with caplog.at_level(logging.WARNING, logger="tactics_sim.sim.instrumentation"):
            second = instrumentation.begin(card, "Shaman", 1, ("Shaman",))
        assert not first.active
        assert second.active
        assert instrumentation.current is second
        assert engine.bus.listener_count == 1
        assert "never ended" in caplog.text
        second.end()
