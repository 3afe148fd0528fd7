"""Heuristic decision oracle -- scores every legal action and plays the best.

The ``HeuristicOracle`` is a hand-crafted policy:

- **Attacks** score by expected damage, with a bonus for lethal hits.
- **Casts** score by the summed value of the card's effects against the
  chosen targets, minus a mana-cost penalty.
- **Moves** score by how much closer the champion gets to its preferred
  distance from the nearest enemy.

How much repositioning is worth relative to attacking is governed by a
:class:`StrategyProfile`.  Two profiles ship: ``striker`` closes distance
and trades hits, ``tactician`` values positioning and lets ranged
champions keep their distance.  A :class:`DifficultyProfile` picks the
strategy and how often the oracle makes a random legal play instead.

When no action scores above zero the oracle ends the turn.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from tactics_sim.ir.effects import (
    BuffEffect,
    DamageEffect,
    DebuffEffect,
    DrawEffect,
    HealEffect,
    ManaEffect,
    MoveEffect,
    Stat,
    StatModEffect,
)
from tactics_sim.sim.actions import AttackAction, CastAction, MoveAction
from tactics_sim.sim.config import Difficulty
from tactics_sim.sim.core.rng import GameRNG
from tactics_sim.sim.engine.board import distance
from tactics_sim.sim.oracles.base import DecisionOracle

if TYPE_CHECKING:
    from tactics_sim.ir.cards import CardDefinition
    from tactics_sim.sim.actions import GameAction
    from tactics_sim.sim.content.registry import ContentRegistry
    from tactics_sim.sim.core.entities import Champion, Position
    from tactics_sim.sim.core.game_state import MatchState

logger = logging.getLogger(__name__)

_ATTACK_BASE = 10.0
_DAMAGE_WEIGHT = 2.0
_LETHAL_BONUS = 25.0
_HEAL_WEIGHT = 1.5
_MODIFIER_WEIGHT = 1.5
_DRAW_WEIGHT = 2.0
_STAT_MOD_WEIGHT = 3.0
_MANA_WEIGHT = 2.0
_COST_WEIGHT = 1.5
_ENGAGE_BONUS = 3.0


class StrategyProfile(BaseModel):
    """Relative weights of attacking and repositioning."""

    model_config = ConfigDict(frozen=True)

    name: str
    attack_weight: float = Field(gt=0)
    reposition_weight: float = Field(ge=0)
    kite: bool = False
    """Ranged champions try to stay at their maximum range."""


class DifficultyProfile(BaseModel):
    """Which strategy a difficulty uses and how often it plays randomly."""

    model_config = ConfigDict(frozen=True)

    name: Difficulty
    strategy: StrategyProfile
    randomness: float = Field(ge=0.0, le=1.0)


STRIKER = StrategyProfile(name="striker", attack_weight=1.5, reposition_weight=0.5)
TACTICIAN = StrategyProfile(
    name="tactician", attack_weight=1.0, reposition_weight=1.5, kite=True,
)

STRATEGIES: dict[str, StrategyProfile] = {
    STRIKER.name: STRIKER,
    TACTICIAN.name: TACTICIAN,
}

DIFFICULTY_PROFILES: dict[Difficulty, DifficultyProfile] = {
    Difficulty.EASY: DifficultyProfile(name=Difficulty.EASY, strategy=STRIKER, randomness=0.3),
    Difficulty.MEDIUM: DifficultyProfile(name=Difficulty.MEDIUM, strategy=STRIKER, randomness=0.1),
    Difficulty.HARD: DifficultyProfile(name=Difficulty.HARD, strategy=TACTICIAN, randomness=0.0),
}


class HeuristicOracle(DecisionOracle):
    """Scores every legal action and picks the highest.

    Parameters
    ----------
    registry:
        Content registry used to look up card definitions.
    rng:
        Seeded RNG for the random-misplay roll.  If ``None``, a default
        ``GameRNG(seed=0)`` is created.
    strategy:
        Overrides the difficulty profile's strategy when given.
    """

    def __init__(
        self,
        registry: ContentRegistry,
        rng: GameRNG | None = None,
        strategy: StrategyProfile | None = None,
    ) -> None:
        self.registry = registry
        self._rng = rng or GameRNG(seed=0)
        self._strategy_override = strategy

    # ------------------------------------------------------------------
    # DecisionOracle interface
    # ------------------------------------------------------------------

    def choose(
        self,
        state: MatchState,
        legal_actions: list[GameAction],
        difficulty: Difficulty,
    ) -> GameAction | None:
        if not legal_actions:
            return None
        profile = DIFFICULTY_PROFILES[Difficulty(difficulty)]
        strategy = self._strategy_override or profile.strategy

        if profile.randomness > 0 and self._rng.random_float() < profile.randomness:
            return self._rng.random_choice(legal_actions)

        best: GameAction | None = None
        best_score = 0.0
        for action in legal_actions:
            score = self.score(state, action, strategy)
            if score > best_score:
                best, best_score = action, score
        return best

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score(self, state: MatchState, action: GameAction, strategy: StrategyProfile) -> float:
        """Return the heuristic value of *action* (higher is better)."""
        if isinstance(action, AttackAction):
            return self._score_attack(state, action, strategy)
        if isinstance(action, CastAction):
            return self._score_cast(state, action, strategy)
        if isinstance(action, MoveAction):
            return self._score_move(state, action, strategy)
        return 0.0

    def _score_attack(self, state: MatchState, action: AttackAction, strategy: StrategyProfile) -> float:
        attacker = state.champions[action.champion]
        target = state.champions[action.target]
        damage = max(1, attacker.effective(Stat.ATTACK) - target.effective(Stat.DEFENSE))
        score = _ATTACK_BASE + min(damage, target.current_hp) * _DAMAGE_WEIGHT
        if damage >= target.current_hp:
            score += _LETHAL_BONUS
        return score * strategy.attack_weight

    def _score_cast(self, state: MatchState, action: CastAction, strategy: StrategyProfile) -> float:
        card = self.registry.get_card(action.card_id)
        if card is None:
            return 0.0
        caster = state.champions[action.caster]
        targets = [state.champions[name] for name in action.targets]
        value = sum(
            self._effect_value(effect, card, state, caster, targets, strategy)
            for effect in card.effects
        )
        if value <= 0:
            return 0.0
        return value - card.cost * _COST_WEIGHT

    def _effect_value(
        self,
        effect,
        card: CardDefinition,
        state: MatchState,
        caster: Champion,
        targets: list[Champion],
        strategy: StrategyProfile,
    ) -> float:
        if isinstance(effect, DamageEffect):
            value = 0.0
            for target in targets:
                value += min(effect.amount, target.current_hp) * _DAMAGE_WEIGHT
                if effect.amount >= target.current_hp:
                    value += _LETHAL_BONUS
            return value * strategy.attack_weight
        if isinstance(effect, HealEffect):
            return sum(
                min(effect.amount, t.max_hp - t.current_hp) * _HEAL_WEIGHT for t in targets
            )
        if isinstance(effect, (BuffEffect, DebuffEffect)):
            return effect.amount * _MODIFIER_WEIGHT * len(targets)
        if isinstance(effect, MoveEffect):
            return self._forced_move_value(effect, state, caster, targets, strategy)
        if isinstance(effect, DrawEffect):
            return effect.count * _DRAW_WEIGHT
        if isinstance(effect, StatModEffect):
            return effect.amount * _STAT_MOD_WEIGHT
        if isinstance(effect, ManaEffect):
            multiplier = 2 if effect.mode == "steal" else 1
            return effect.amount * _MANA_WEIGHT * multiplier
        return 0.0

    def _forced_move_value(
        self,
        effect: MoveEffect,
        state: MatchState,
        caster: Champion,
        targets: list[Champion],
        strategy: StrategyProfile,
    ) -> float:
        value = 0.0
        for target in targets:
            if target.name != caster.name:
                # Pushing an enemy away only helps ranged casters.
                if effect.direction == "away" and caster.effective(Stat.RANGE) > 1:
                    value += effect.distance * strategy.reposition_weight
                continue
            nearest = _nearest_enemy_distance(state, caster, caster.position)
            if nearest is None:
                continue
            preferred = self._preferred_distance(caster, strategy)
            if effect.direction == "toward" and nearest > preferred:
                value += min(effect.distance, nearest - preferred) * strategy.reposition_weight
            elif effect.direction == "away" and nearest < preferred:
                value += min(effect.distance, preferred - nearest) * strategy.reposition_weight
        return value

    def _score_move(self, state: MatchState, action: MoveAction, strategy: StrategyProfile) -> float:
        unit = state.champions[action.champion]
        before = _nearest_enemy_distance(state, unit, unit.position)
        after = _nearest_enemy_distance(state, unit, tuple(action.destination))
        if before is None or after is None:
            return 0.0
        preferred = self._preferred_distance(unit, strategy)
        improvement = abs(before - preferred) - abs(after - preferred)
        score = improvement * strategy.reposition_weight
        reach = unit.effective(Stat.RANGE)
        if not unit.has_attacked and after <= reach < before:
            score += _ENGAGE_BONUS
        return score

    @staticmethod
    def _preferred_distance(unit: Champion, strategy: StrategyProfile) -> int:
        if strategy.kite:
            return unit.effective(Stat.RANGE)
        return 1


def _nearest_enemy_distance(state: MatchState, unit: Champion, position: Position) -> int | None:
    enemies = state.enemies_of(unit)
    if not enemies:
        return None
    return min(distance(position, enemy.position) for enemy in enemies)
