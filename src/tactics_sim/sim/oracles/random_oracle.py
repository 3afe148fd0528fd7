"""Random decision oracle -- picks legal actions uniformly at random.

The ``RandomOracle`` is the simplest possible oracle.  It is the baseline
for batch runs: a champion pair that cannot beat random play is probably
broken, and random play exercises every card regardless of its value.

Behaviour:
    - Each time the oracle is asked, there is a 10 % chance it ends the
      turn (simulating "pass").
    - Otherwise it picks a random action from the legal set.
    - Difficulty is ignored.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tactics_sim.sim.core.rng import GameRNG
from tactics_sim.sim.oracles.base import DecisionOracle

if TYPE_CHECKING:
    from tactics_sim.sim.actions import GameAction
    from tactics_sim.sim.config import Difficulty
    from tactics_sim.sim.core.game_state import MatchState


class RandomOracle(DecisionOracle):
    """Oracle that plays random legal actions.

    Parameters
    ----------
    rng:
        Seeded RNG for deterministic randomness.  If ``None``, a default
        ``GameRNG(seed=0)`` is created.
    end_turn_chance:
        Probability (0.0 -- 1.0) that the oracle voluntarily ends the turn
        instead of acting.  Default is 0.10 (10 %).
    """

    def __init__(
        self,
        rng: GameRNG | None = None,
        end_turn_chance: float = 0.10,
    ) -> None:
        self._rng = rng or GameRNG(seed=0)
        self._end_turn_chance = end_turn_chance

    def choose(
        self,
        state: MatchState,
        legal_actions: list[GameAction],
        difficulty: Difficulty,
    ) -> GameAction | None:
        if not legal_actions:
            return None
        if self._rng.random_float() < self._end_turn_chance:
            return None
        return self._rng.random_choice(legal_actions)
