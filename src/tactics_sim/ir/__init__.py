"""Intermediate Representation (IR) for champions, cards and card effects.

All static game content is represented as Pydantic models that load cleanly
from the JSON data files shipped with the package.
"""

from .cards import CardDefinition, CardTarget, CardType
from .champions import ChampionDefinition
from .effects import (
    CAST_SCOPED_EFFECT_KINDS,
    SILENT_EFFECT_KINDS,
    BuffEffect,
    DamageEffect,
    DebuffEffect,
    DrawEffect,
    Effect,
    EffectKind,
    HealEffect,
    ManaEffect,
    MoveEffect,
    Stat,
    StatModEffect,
)

__all__ = [
    # cards
    "CardDefinition",
    "CardTarget",
    "CardType",
    # champions
    "ChampionDefinition",
    # effects
    "BuffEffect",
    "CAST_SCOPED_EFFECT_KINDS",
    "DamageEffect",
    "DebuffEffect",
    "DrawEffect",
    "Effect",
    "EffectKind",
    "HealEffect",
    "ManaEffect",
    "MoveEffect",
    "SILENT_EFFECT_KINDS",
    "Stat",
    "StatModEffect",
]
