"""Atomic actions a player can submit to the rules engine.

Each action is a frozen Pydantic model tagged by ``kind`` so recorded
action logs serialize to JSON and load back into the right variant.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from tactics_sim.sim.core.entities import Position


class MoveAction(BaseModel):
    """Move *champion* to *destination* (must be a reachable tile)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["move"] = "move"
    champion: str
    destination: Position


class AttackAction(BaseModel):
    """Basic attack from *champion* against the enemy *target*."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["attack"] = "attack"
    champion: str
    target: str


class CastAction(BaseModel):
    """Cast the card copy *card_instance* from hand.

    ``targets`` lists the chosen champion names; it is empty for ``NONE``
    cards and may hold several names for ``ALL_ENEMIES`` cards.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["cast"] = "cast"
    card_instance: str
    card_id: str
    caster: str
    targets: tuple[str, ...] = ()


GameAction = Annotated[
    Union[MoveAction, AttackAction, CastAction],
    Field(discriminator="kind"),
]


def describe_action(action: MoveAction | AttackAction | CastAction) -> str:
    """Return a short human-readable description used in log messages."""
    if isinstance(action, MoveAction):
        return f"{action.champion} moves to {action.destination}"
    if isinstance(action, AttackAction):
        return f"{action.champion} attacks {action.target}"
    targets = ", ".join(action.targets) or "-"
    return f"{action.caster} casts {action.card_id} on [{targets}]"
