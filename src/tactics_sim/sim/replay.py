"""Replay a recorded match from its action log.

A :class:`MatchResult` carries the seed it was played with and the ordered
list of executed actions.  Replaying builds a fresh engine on the same
``engine`` RNG stream, deploys the same rosters and resubmits every action,
advancing turns through the same primitives the executor uses.  The oracle
is not needed: its choices are already in the log.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tactics_sim.sim.actions import AttackAction, CastAction, MoveAction
from tactics_sim.sim.core.rng import GameRNG
from tactics_sim.sim.engine.skirmish import SkirmishEngine
from tactics_sim.sim.runner import advance_turn, drain_response_window

if TYPE_CHECKING:
    from tactics_sim.sim.content.registry import ContentRegistry
    from tactics_sim.sim.engine.base import RulesEngine
    from tactics_sim.sim.runner import EngineFactory
    from tactics_sim.sim.telemetry import MatchResult

logger = logging.getLogger(__name__)

# Replay never stops on the round limit; the log decides when to stop.
_UNBOUNDED_ROUNDS = 10**9
_REPLAY_RESPONSE_PASSES = 64


class ReplayDivergenceError(RuntimeError):
    """Raised when a recorded action is rejected during replay."""


def replay_match(
    result: MatchResult,
    registry: ContentRegistry,
    engine_factory: EngineFactory | None = None,
) -> RulesEngine:
    """Re-execute *result*'s action log and return the engine in its final state.

    Raises
    ------
    ValueError
        If the recorded rosters cannot be set up.
    ReplayDivergenceError
        If any recorded action is rejected.
    """
    factory = engine_factory or SkirmishEngine
    rng = GameRNG(result.seed_used)
    engine = factory(registry, rng.fork("engine"))
    config = result.config
    if not engine.initialize(list(config.roster_a), list(config.roster_b)):
        raise ValueError(
            f"Cannot replay match {config.index}: rosters {config.roster_a} "
            f"vs {config.roster_b} rejected"
        )

    for step in result.actions:
        while engine.state.turn < step.turn:
            advance_turn(engine, _UNBOUNDED_ROUNDS)
        drain_response_window(engine, _REPLAY_RESPONSE_PASSES)
        if not _submit(engine, step.player, step.action):
            raise ReplayDivergenceError(
                f"Replay of match {config.index} diverged at action {step.index} "
                f"(round {step.round}, turn {step.turn})"
            )
    logger.debug("Replayed %d actions of match %d", len(result.actions), config.index)
    return engine


def replay_final_hp(
    result: MatchResult,
    registry: ContentRegistry,
    engine_factory: EngineFactory | None = None,
) -> dict[str, int]:
    """Replay *result* and return each champion's final HP (floored at 0)."""
    engine = replay_match(result, registry, engine_factory)
    return {name: max(0, c.current_hp) for name, c in engine.state.champions.items()}


def _submit(engine: RulesEngine, player: int, action) -> bool:
    if isinstance(action, MoveAction):
        return engine.move(action.champion, tuple(action.destination))
    if isinstance(action, AttackAction):
        return engine.attack(action.champion, action.target).success
    if isinstance(action, CastAction):
        return engine.cast(player, action.card_instance, tuple(action.targets))
    return False
