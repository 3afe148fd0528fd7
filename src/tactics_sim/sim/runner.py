"""Match simulation runner -- ties the rules engine, decision oracle and telemetry together.

Provides:

- **MatchExecutor**: runs a single match to completion under the safety
  limits and returns a :class:`MatchResult`.
- :func:`enumerate_legal_actions`, :func:`drain_response_window` and
  :func:`advance_turn`: turn primitives shared with the replayer so a
  recorded match is re-driven through exactly the same transitions.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, TYPE_CHECKING

from tactics_sim.ir.cards import CardType
from tactics_sim.sim.actions import AttackAction, CastAction, MoveAction, describe_action
from tactics_sim.sim.config import MatchConfig, SafetyLimits
from tactics_sim.sim.core.game_state import CardInstance
from tactics_sim.sim.core.rng import GameRNG
from tactics_sim.sim.engine.skirmish import SkirmishEngine
from tactics_sim.sim.instrumentation import EffectInstrumentation
from tactics_sim.sim.oracles.heuristic_oracle import HeuristicOracle
from tactics_sim.sim.telemetry import (
    CardPlayRecord,
    DeathRecord,
    DiscardRecord,
    MatchResult,
    MatchStatus,
    ReplayAction,
    RoundSummary,
    TurnLog,
    WinReason,
)

if TYPE_CHECKING:
    from tactics_sim.sim.actions import GameAction
    from tactics_sim.sim.content.registry import ContentRegistry
    from tactics_sim.sim.engine.base import RulesEngine
    from tactics_sim.sim.oracles.base import DecisionOracle

logger = logging.getLogger(__name__)

EngineFactory = Callable[["ContentRegistry", GameRNG], "RulesEngine"]
OracleFactory = Callable[["ContentRegistry", GameRNG], "DecisionOracle"]

ROSTER_SIZE = 2


def _default_oracle(registry: ContentRegistry, rng: GameRNG) -> DecisionOracle:
    return HeuristicOracle(registry, rng)


# =====================================================================
# Shared turn primitives
# =====================================================================

def enumerate_legal_actions(engine: RulesEngine, registry: ContentRegistry) -> list[GameAction]:
    """List every action the active player may take right now.

    Order is deterministic: casts (hand order, then target-set order),
    then attacks, then moves, champion by champion.
    """
    state = engine.state
    player = state.active_player
    actions: list[GameAction] = []

    for instance in state.players[player].piles.hand:
        card = registry.get_card(instance.card_id)
        if card is None or card.type == CardType.RESPONSE:
            continue
        if not engine.can_cast(player, instance.id):
            continue
        for targets in engine.cast_targets(card, instance.champion):
            actions.append(CastAction(
                card_instance=instance.id,
                card_id=card.id,
                caster=instance.champion,
                targets=targets,
            ))

    living = state.living_champions(player)
    for champion in living:
        for target in engine.attack_targets(champion.name):
            actions.append(AttackAction(champion=champion.name, target=target))
    for champion in living:
        for tile in engine.reachable_tiles(champion.name):
            actions.append(MoveAction(champion=champion.name, destination=tile))
    return actions


def drain_response_window(engine: RulesEngine, max_passes: int) -> bool:
    """Pass priority until the response window closes.

    Returns ``False`` if the window is still open after *max_passes*.
    """
    passes = 0
    while engine.response_window_open():
        if passes >= max_passes:
            return False
        engine.pass_priority()
        passes += 1
    return True


@dataclass
class TurnTransition:
    """What :func:`advance_turn` did."""

    discarded: list[CardInstance] = field(default_factory=list)
    continued: bool = True
    """``False`` when the next turn would exceed the round limit."""
    new_round: bool = False


def advance_turn(engine: RulesEngine, max_rounds: int) -> TurnTransition:
    """End the active player's turn and start the next one.

    Discards the hand down to the hand limit (newest card first), expires
    temporary modifiers, switches the active player, increments the round
    on wraparound, refills the new player's mana and flags and draws one
    card if they are under the hand limit.  Stops short of starting a turn
    whose round would exceed *max_rounds*.
    """
    state = engine.state
    player = state.active_player
    transition = TurnTransition()

    hand = state.players[player].piles.hand
    while len(hand) > engine.hand_limit:
        transition.discarded.append(engine.discard_from_hand(player, hand[-1].id))

    engine.expire_modifiers()

    next_player = state.inactive_player
    transition.new_round = next_player == 1
    next_round = state.round + 1 if transition.new_round else state.round
    if next_round > max_rounds:
        transition.continued = False
        return transition

    engine.start_turn(next_player, next_round)
    if len(state.players[next_player].piles.hand) < engine.hand_limit:
        engine.draw_cards(next_player, 1)
    return transition


# =====================================================================
# MatchExecutor
# =====================================================================

class _SetupFailure(Exception):
    """Internal: the match could not be set up."""


@dataclass
class _MatchContext:
    config: MatchConfig
    engine: RulesEngine
    oracle: DecisionOracle
    instrumentation: EffectInstrumentation
    result: MatchResult
    round_summary: RoundSummary
    iterations: int = 0
    consecutive_passes: int = 0
    ceiling_hit: bool = False
    finished: bool = False


class MatchExecutor:
    """Runs one match to completion.

    Parameters
    ----------
    registry:
        Content registry shared by the engine and the oracle.
    limits:
        Safety limits; defaults to :class:`SafetyLimits` defaults.
    oracle_factory:
        Builds the decision oracle for a match from the registry and the
        match's ``oracle`` RNG stream.  Defaults to :class:`HeuristicOracle`.
    engine_factory:
        Builds the rules engine from the registry and the match's
        ``engine`` RNG stream.  Defaults to :class:`SkirmishEngine`.
    """

    def __init__(
        self,
        registry: ContentRegistry,
        limits: SafetyLimits | None = None,
        oracle_factory: OracleFactory | None = None,
        engine_factory: EngineFactory | None = None,
    ) -> None:
        self.registry = registry
        self.limits = limits or SafetyLimits()
        self.oracle_factory = oracle_factory or _default_oracle
        self.engine_factory = engine_factory or SkirmishEngine

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, config: MatchConfig, seed: int, rng: GameRNG | None = None) -> MatchResult:
        """Run *config* and return its result.

        Never raises for match-level problems: setup failures, the
        iteration ceiling and unexpected exceptions all come back as a
        failed (possibly partial) result.

        Parameters
        ----------
        config:
            The match to play.
        seed:
            Seed recorded as ``seed_used``.
        rng:
            The session RNG handle, already reseeded with *seed*.  A fresh
            ``GameRNG(seed)`` is used when omitted.
        """
        rng = rng if rng is not None else GameRNG(seed)
        result = MatchResult(config=config, seed_used=seed)
        ctx: _MatchContext | None = None
        try:
            ctx = self._setup(config, rng, result)
            self._run(ctx)
        except _SetupFailure as exc:
            self._fail(result, WinReason.SETUP_FAILED, str(exc))
            logger.warning("Match %d failed setup: %s", config.index, exc)
        except Exception as exc:
            logger.exception("Match %d crashed", config.index)
            self._fail(result, WinReason.ENGINE_ERROR, f"{type(exc).__name__}: {exc}")
            if ctx is not None and not ctx.finished:
                self._finish_partial(ctx)
        return result

    # ------------------------------------------------------------------
    # Match loop
    # ------------------------------------------------------------------

    def _setup(self, config: MatchConfig, rng: GameRNG, result: MatchResult) -> _MatchContext:
        for label, roster in (("roster_a", config.roster_a), ("roster_b", config.roster_b)):
            if len(roster) != ROSTER_SIZE or len(set(roster)) != ROSTER_SIZE:
                raise _SetupFailure(
                    f"{label} must name exactly {ROSTER_SIZE} distinct champions, got {roster}"
                )

        try:
            engine = self.engine_factory(self.registry, rng.fork("engine"))
        except Exception as exc:
            raise _SetupFailure(f"rules engine could not be constructed: {exc}") from exc
        if not engine.initialize(list(config.roster_a), list(config.roster_b)):
            raise _SetupFailure(
                f"match setup rejected rosters {config.roster_a} vs {config.roster_b}"
            )
        oracle = self.oracle_factory(self.registry, rng.fork("oracle"))

        state = engine.state
        for name, champion in state.champions.items():
            result.starting_positions[name] = champion.position
            result.champion_owners[name] = champion.owner

        return _MatchContext(
            config=config,
            engine=engine,
            oracle=oracle,
            instrumentation=EffectInstrumentation(engine),
            result=result,
            round_summary=self._open_round(engine),
        )

    def _run(self, ctx: _MatchContext) -> None:
        config = ctx.config
        engine = ctx.engine
        result = ctx.result
        state = engine.state

        while True:
            self._play_turn(ctx)

            if ctx.ceiling_hit:
                message = (
                    f"iteration ceiling of {self.limits.max_iterations} reached "
                    f"in round {state.round}"
                )
                logger.error("Match %d: %s", config.index, message)
                self._fail(result, WinReason.ITERATION_CEILING, message)
                break

            winner = engine.check_winner()
            if winner is not None:
                result.winner = winner
                result.win_reason = (
                    WinReason.ELIMINATION if winner else WinReason.MUTUAL_ELIMINATION
                )
                break

            if ctx.consecutive_passes >= self.limits.max_consecutive_passes:
                message = (
                    f"stalemate after {ctx.consecutive_passes} consecutive turns "
                    f"without an action"
                )
                logger.warning("Match %d: %s", config.index, message)
                result.warnings.append(message)
                result.winner = 0
                result.win_reason = WinReason.STALEMATE
                break

            transition = advance_turn(engine, self.limits.max_rounds)
            if result.turns:
                result.turns[-1].discarded.extend(
                    DiscardRecord(card_id=c.card_id) for c in transition.discarded
                )
            for card in transition.discarded:
                result.cards_discarded[card.card_id] = result.cards_discarded.get(card.card_id, 0) + 1

            if not transition.continued:
                self._decide_by_hp(ctx)
                break
            if transition.new_round:
                self._close_round(ctx)
                ctx.round_summary = self._open_round(engine)

        self._finish(ctx)

    def _play_turn(self, ctx: _MatchContext) -> None:
        engine = ctx.engine
        state = engine.state
        player = state.active_player
        difficulty = ctx.config.p1_difficulty if player == 1 else ctx.config.p2_difficulty
        log = TurnLog(
            turn=state.turn,
            round=state.round,
            player=player,
            mana_start=state.players[player].mana,
        )
        ctx.result.turns.append(log)

        while True:
            if log.actions >= self.limits.max_actions_per_turn:
                log.end_reason = "action cap"
                break
            ctx.iterations += 1
            if ctx.iterations > self.limits.max_iterations:
                ctx.ceiling_hit = True
                log.end_reason = "iteration ceiling"
                break
            if not drain_response_window(engine, self.limits.max_response_passes):
                message = (
                    f"response window still open after "
                    f"{self.limits.max_response_passes} passes"
                )
                logger.warning("Match %d: %s", ctx.config.index, message)
                ctx.result.warnings.append(message)
                log.end_reason = "response window stuck"
                break

            legal = enumerate_legal_actions(engine, self.registry)
            if not legal:
                log.end_reason = "no legal actions"
                break
            action = ctx.oracle.choose(engine.snapshot(), legal, difficulty)
            if action is None:
                log.end_reason = "passed"
                break
            if not self._execute(ctx, action, log):
                message = (
                    f"round {state.round} turn {state.turn}: action rejected "
                    f"({describe_action(action)})"
                )
                logger.warning("Match %d: %s", ctx.config.index, message)
                ctx.result.warnings.append(message)
                log.end_reason = "action rejected"
                break
            if engine.check_winner() is not None:
                log.end_reason = "match over"
                break

        log.mana_end = state.players[player].mana
        ctx.round_summary.actions[player] = ctx.round_summary.actions.get(player, 0) + log.actions
        if log.actions == 0:
            ctx.consecutive_passes += 1
        else:
            ctx.consecutive_passes = 0

    def _execute(self, ctx: _MatchContext, action: GameAction, log: TurnLog) -> bool:
        engine = ctx.engine
        state = engine.state
        player = state.active_player
        alive_before = {name for name, c in state.champions.items() if not c.is_dead}
        damage = 0

        if isinstance(action, MoveAction):
            actor = action.champion
            success = engine.move(action.champion, tuple(action.destination))
        elif isinstance(action, AttackAction):
            actor = action.champion
            outcome = engine.attack(action.champion, action.target)
            success = outcome.success
            damage = outcome.damage
        elif isinstance(action, CastAction):
            actor = action.caster
            card = self.registry.get_card(action.card_id)
            if card is None:
                return False
            mana_available = state.players[player].mana
            with ctx.instrumentation.begin(card, action.caster, player, action.targets) as window:
                success = engine.cast(player, action.card_instance, action.targets)
                effect = window.end()
            if success:
                damage = effect.damage
                ctx.result.card_plays.append(CardPlayRecord(
                    card_id=card.id,
                    card_name=card.name,
                    caster=action.caster,
                    player=player,
                    round=state.round,
                    turn=state.turn,
                    mana_cost=card.cost,
                    mana_available=mana_available,
                    targets=tuple(action.targets),
                    outcome=effect,
                ))
                log.cards_played.append(card.id)
        else:
            return False

        if not success:
            return False

        ctx.result.actions.append(ReplayAction(
            index=len(ctx.result.actions),
            round=state.round,
            turn=state.turn,
            player=player,
            action=action,
            success=True,
            damage_dealt=damage,
        ))
        log.actions += 1

        for name in sorted(alive_before):
            champion = state.champions[name]
            if champion.is_dead:
                ctx.round_summary.deaths.append(DeathRecord(
                    champion=name,
                    owner=champion.owner,
                    round=state.round,
                    turn=state.turn,
                    killer=actor if champion.owner != player else None,
                ))
        return True

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    @staticmethod
    def _open_round(engine: RulesEngine) -> RoundSummary:
        state = engine.state
        return RoundSummary(
            round=state.round,
            mana_start={p: ps.mana for p, ps in state.players.items()},
            actions={1: 0, 2: 0},
            hp_start={name: c.current_hp for name, c in state.champions.items()},
        )

    @staticmethod
    def _close_round(ctx: _MatchContext) -> None:
        state = ctx.engine.state
        summary = ctx.round_summary
        summary.hp_end = {name: c.current_hp for name, c in state.champions.items()}
        ctx.result.rounds.append(summary)

    def _decide_by_hp(self, ctx: _MatchContext) -> None:
        state = ctx.engine.state
        hp_1 = state.total_hp(1)
        hp_2 = state.total_hp(2)
        if hp_1 == hp_2:
            ctx.result.winner = 0
            ctx.result.win_reason = WinReason.ROUND_LIMIT_TIE
        else:
            ctx.result.winner = 1 if hp_1 > hp_2 else 2
            ctx.result.win_reason = WinReason.ROUND_LIMIT_HP
        logger.info(
            "Match %d hit the round limit (%d): HP %d vs %d",
            ctx.config.index, self.limits.max_rounds, hp_1, hp_2,
        )

    def _finish(self, ctx: _MatchContext) -> None:
        ctx.finished = True
        result = ctx.result
        state = ctx.engine.state
        self._close_round(ctx)

        result.total_rounds = state.round
        result.total_turns = state.turn
        result.total_actions = len(result.actions)
        result.final_hp = {name: max(0, c.current_hp) for name, c in state.champions.items()}

        drawn: Counter[str] = Counter()
        held: Counter[str] = Counter()
        for player_state in state.players.values():
            drawn.update(player_state.piles.drawn_log)
            held.update(card.card_id for card in player_state.piles.hand)
        result.cards_drawn = dict(drawn)
        result.cards_held = dict(held)

        logger.debug(
            "Match %d finished: winner=%d (%s) after %d rounds, %d actions",
            ctx.config.index, result.winner, result.win_reason,
            result.total_rounds, result.total_actions,
        )

    def _finish_partial(self, ctx: _MatchContext) -> None:
        """Fill in totals and final HP for a match that crashed mid-loop."""
        try:
            self._finish(ctx)
        except Exception as exc:
            logger.error("Match %d: could not summarise partial result: %s", ctx.config.index, exc)
            ctx.result.errors.append(f"partial summary failed: {type(exc).__name__}: {exc}")

    @staticmethod
    def _fail(result: MatchResult, reason: str, message: str) -> None:
        result.status = MatchStatus.FAILED
        result.winner = 0
        result.win_reason = reason
        result.errors.append(message)
