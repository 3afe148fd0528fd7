"""Tests for the effect bus and subscription handles."""

from __future__ import annotations

from tactics_sim.sim.engine.events import EffectBus, EffectEvent, EffectEventKind


def _event(amount: int = 3) -> EffectEvent:
    return EffectEvent(kind=EffectEventKind.DAMAGE, source="Brute", target="Ranger", amount=amount)


class TestEffectBus:
    def test_publish_reaches_subscribers(self):
        bus = EffectBus()
        seen: list[EffectEvent] = []
        bus.subscribe(seen.append)
        bus.publish(_event())
        assert seen == [_event()]

    def test_closed_subscription_stops_delivery(self):
        bus = EffectBus()
        seen: list[EffectEvent] = []
        sub = bus.subscribe(seen.append)
        sub.close()
        bus.publish(_event())
        assert seen == []
        assert bus.listener_count == 0
        assert not sub.active

    def test_close_is_idempotent(self):
        bus = EffectBus()
        sub = bus.subscribe(lambda e: None)
        sub.close()
        sub.close()
        assert bus.listener_count == 0

    def test_context_manager_detaches(self):
        bus = EffectBus()
        with bus.subscribe(lambda e: None):
            assert bus.listener_count == 1
        assert bus.listener_count == 0
