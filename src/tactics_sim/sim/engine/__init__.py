"""Rules-engine interface, effect bus and the reference skirmish engine.

Consumers can do::

    from tactics_sim.sim.engine import RulesEngine, SkirmishEngine
"""

from .base import AttackOutcome, RulesEngine
from .events import EffectBus, EffectEvent, EffectEventKind, Subscription
from .skirmish import SkirmishEngine

__all__ = [
    "AttackOutcome",
    "EffectBus",
    "EffectEvent",
    "EffectEventKind",
    "RulesEngine",
    "SkirmishEngine",
    "Subscription",
]
