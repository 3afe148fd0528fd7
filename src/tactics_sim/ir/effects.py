"""Card effect variants -- the behavioral IR for every card in the game.

Each effect kind is its own Pydantic model tagged by ``kind``.  The
:data:`Effect` union is discriminated on that tag, so raw JSON is resolved
into concrete variants once, when the content registry loads its data files.
Nothing downstream re-interprets untyped payloads.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class EffectKind(str, Enum):
    """Primitive effect kinds a card can declare."""

    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"
    DEBUFF = "debuff"
    MOVE = "move"
    DRAW = "draw"
    STAT_MOD = "stat_mod"
    MANA = "mana"


class Stat(str, Enum):
    """Champion stats that buffs, debuffs and stat modifiers can touch."""

    ATTACK = "attack"
    DEFENSE = "defense"
    MOVE = "move"
    RANGE = "range"


class DamageEffect(BaseModel):
    """Deal flat damage to every target (spells ignore defense)."""

    kind: Literal["damage"] = "damage"
    amount: int = Field(ge=0)


class HealEffect(BaseModel):
    """Restore HP to every target, capped at max HP."""

    kind: Literal["heal"] = "heal"
    amount: int = Field(ge=0)


class BuffEffect(BaseModel):
    """Temporary positive stat modifier.

    ``duration`` counts turn ends: 1 expires at the end of the current turn.
    """

    kind: Literal["buff"] = "buff"
    stat: Stat
    amount: int = Field(ge=0)
    duration: int = Field(default=1, ge=1)


class DebuffEffect(BaseModel):
    """Temporary negative stat modifier; ``amount`` is the size of the penalty."""

    kind: Literal["debuff"] = "debuff"
    stat: Stat
    amount: int = Field(ge=0)
    duration: int = Field(default=1, ge=1)


class MoveEffect(BaseModel):
    """Shift each target up to ``distance`` tiles.

    The reference point is the caster, or the nearest living enemy when the
    target is the caster itself.
    """

    kind: Literal["move"] = "move"
    distance: int = Field(ge=0)
    direction: Literal["toward", "away"] = "away"


class DrawEffect(BaseModel):
    """Caster's player draws ``count`` cards."""

    kind: Literal["draw"] = "draw"
    count: int = Field(ge=0)


class StatModEffect(BaseModel):
    """Permanent stat change.  The rules engine applies it silently."""

    kind: Literal["stat_mod"] = "stat_mod"
    stat: Stat
    amount: int


class ManaEffect(BaseModel):
    """Mana manipulation.  The rules engine applies it silently.

    - ``grant``: caster's player gains ``amount`` mana now.
    - ``lock``: opponent starts their next turn with ``amount`` less mana.
    - ``steal``: both of the above.
    """

    kind: Literal["mana"] = "mana"
    mode: Literal["grant", "lock", "steal"] = "grant"
    amount: int = Field(ge=0)


Effect = Annotated[
    Union[
        DamageEffect,
        HealEffect,
        BuffEffect,
        DebuffEffect,
        MoveEffect,
        DrawEffect,
        StatModEffect,
        ManaEffect,
    ],
    Field(discriminator="kind"),
]

# Kinds the rules engine resolves without emitting a discrete event.
SILENT_EFFECT_KINDS = frozenset({EffectKind.STAT_MOD, EffectKind.MANA})

# Kinds resolved once per cast rather than once per target.
CAST_SCOPED_EFFECT_KINDS = frozenset({EffectKind.DRAW, EffectKind.MANA})
