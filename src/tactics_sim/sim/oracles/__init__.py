"""Decision oracles for headless self-play.

Re-exports the base class and all concrete oracle implementations so
consumers can do::

    from tactics_sim.sim.oracles import DecisionOracle, HeuristicOracle
"""

from .base import DecisionOracle
from .heuristic_oracle import (
    DIFFICULTY_PROFILES,
    STRATEGIES,
    DifficultyProfile,
    HeuristicOracle,
    StrategyProfile,
)
from .random_oracle import RandomOracle

__all__ = [
    "DIFFICULTY_PROFILES",
    "DecisionOracle",
    "DifficultyProfile",
    "HeuristicOracle",
    "RandomOracle",
    "STRATEGIES",
    "StrategyProfile",
]
