"""Shared fixtures for simulator tests."""

from __future__ import annotations

import pytest

from tactics_sim.sim.core.rng import GameRNG
from tactics_sim.sim.engine.skirmish import SkirmishEngine
from tactics_sim.sim.oracles.base import DecisionOracle


class PassOracle(DecisionOracle):
    """Oracle that always ends the turn without acting."""

    def choose(self, state, legal_actions, difficulty):
        return None


@pytest.fixture
def pass_oracle_factory():
    return lambda registry, rng: PassOracle()


@pytest.fixture
def engine(registry) -> SkirmishEngine:
    """Fresh Ranger+Shaman (P1) vs Brute+Beast (P2) engine on turn 1.

    Brute and Beast carry no RESPONSE cards, so no response window opens
    at the start of player 1's turns.
    """
    eng = SkirmishEngine(registry, GameRNG(7))
    assert eng.initialize(["Ranger", "Shaman"], ["Brute", "Beast"])
    return eng
