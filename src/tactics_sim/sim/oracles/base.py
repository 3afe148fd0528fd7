"""Base class for decision oracles that pick actions during self-play.

All oracles must subclass ``DecisionOracle`` and implement :meth:`choose`.
The match executor calls it at every decision point with a state snapshot
and the full list of legal actions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tactics_sim.sim.actions import GameAction
    from tactics_sim.sim.config import Difficulty
    from tactics_sim.sim.core.game_state import MatchState


class DecisionOracle(ABC):
    """Base class for action-choosing policies."""

    @abstractmethod
    def choose(
        self,
        state: MatchState,
        legal_actions: list[GameAction],
        difficulty: Difficulty,
    ) -> GameAction | None:
        """Choose one action for the active player.

        Parameters
        ----------
        state:
            A snapshot of the match, giving the oracle full observability.
            Mutating it has no effect on the match.
        legal_actions:
            Every action the rules engine currently accepts, in a
            deterministic order.  Never empty.
        difficulty:
            Difficulty profile of the player being asked.

        Returns
        -------
        GameAction | None
            One element of *legal_actions*, or ``None`` to end the turn.
        """
