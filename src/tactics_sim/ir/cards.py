"""Card definitions -- every card belongs to exactly one champion."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from .effects import Effect, EffectKind


class CardType(str, Enum):
    """ACTION cards are cast on the owner's turn; RESPONSE cards only inside
    a response window."""

    ACTION = "ACTION"
    RESPONSE = "RESPONSE"


class CardTarget(str, Enum):
    """Targeting mode enforced by the rules engine."""

    SELF = "SELF"
    ALLY = "ALLY"
    ENEMY = "ENEMY"
    ALL_ENEMIES = "ALL_ENEMIES"
    NONE = "NONE"


class CardDefinition(BaseModel):
    """Complete definition of a single card."""

    id: str
    """Unique identifier used for cross-references (e.g. ``"smash"``)."""

    name: str
    """Display name."""

    champion: str
    """Name of the champion that owns and casts this card."""

    type: CardType = CardType.ACTION

    cost: int = Field(ge=0)
    """Mana cost to cast."""

    target: CardTarget

    range: int | None = None
    """Maximum Manhattan distance from the caster to a target.  ``None`` means
    unlimited; ignored for SELF and NONE cards."""

    description: str = ""

    effects: list[Effect] = Field(default_factory=list)
    """Ordered effect list resolved when the card is cast."""

    @property
    def effect_kinds(self) -> frozenset[EffectKind]:
        return frozenset(EffectKind(effect.kind) for effect in self.effects)
