"""Effect events and the observer bus the rules engine publishes them on.

The engine emits one :class:`EffectEvent` per measurable change (damage,
heal, buff, debuff, movement) plus generic ``EFFECT_APPLIED`` events for
draw.  Silent kinds (stat modifiers, mana) never emit.

Listeners subscribe through :meth:`EffectBus.subscribe`, which returns a
:class:`Subscription` handle; closing the handle (or leaving its ``with``
block) detaches the listener.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EffectEventKind(str, Enum):
    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"
    DEBUFF = "debuff"
    MOVEMENT = "movement"
    EFFECT_APPLIED = "effect_applied"


@dataclass(frozen=True)
class EffectEvent:
    """One measurable change made while resolving a card or attack.

    Attributes
    ----------
    kind:
        Event category.
    source:
        Champion that caused the change.
    target:
        Champion affected, or ``None`` for player-level effects (draw).
    amount:
        Magnitude (HP lost/restored, modifier size, tiles moved, cards drawn).
    category:
        Sub-category for ``EFFECT_APPLIED`` events (``"draw"``).
    """

    kind: EffectEventKind
    source: str
    target: str | None
    amount: int
    category: str | None = None


EffectListener = Callable[[EffectEvent], None]


class Subscription:
    """Handle returned by :meth:`EffectBus.subscribe`."""

    def __init__(self, bus: EffectBus, listener: EffectListener) -> None:
        self._bus = bus
        self._listener = listener
        self.active = True

    def close(self) -> None:
        if self.active:
            self._bus._detach(self._listener)
            self.active = False

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class EffectBus:
    """Synchronous publish/subscribe channel for :class:`EffectEvent`."""

    def __init__(self) -> None:
        self._listeners: list[EffectListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: EffectListener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def publish(self, event: EffectEvent) -> None:
        logger.debug("Effect event: %s", event)
        for listener in list(self._listeners):
            listener(event)

    def _detach(self, listener: EffectListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            logger.warning("Listener %r was not subscribed", listener)
