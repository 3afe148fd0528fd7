"""Core simulation primitives for the match simulator."""

from tactics_sim.sim.core.entities import Champion, Position, StatModifier
from tactics_sim.sim.core.game_state import (
    CardInstance,
    CardPiles,
    MatchPhase,
    MatchState,
    PlayerState,
    ResponseWindow,
)
from tactics_sim.sim.core.rng import GameRNG

__all__ = [
    # rng
    "GameRNG",
    # entities
    "Champion",
    "Position",
    "StatModifier",
    # game_state
    "CardInstance",
    "CardPiles",
    "MatchPhase",
    "MatchState",
    "PlayerState",
    "ResponseWindow",
]
