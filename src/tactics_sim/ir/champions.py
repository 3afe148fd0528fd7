"""Champion definitions -- base stats plus the cards a champion brings to a deck."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ChampionDefinition(BaseModel):
    """Static definition of a champion."""

    name: str
    """Unique name; champions are identified by name everywhere."""

    max_hp: int = Field(gt=0)
    attack: int = Field(ge=0)
    defense: int = Field(ge=0)
    move: int = Field(ge=0)
    range: int = Field(ge=1)

    cards: list[str] = Field(default_factory=list)
    """Card ids this champion contributes to its player's deck.  Repeated ids
    add multiple copies."""
