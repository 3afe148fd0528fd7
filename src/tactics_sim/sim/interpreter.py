"""Effect interpreter -- bridge between card definitions and match state.

Walks a card's tagged effect list and applies each variant to the match
state, publishing an :class:`EffectEvent` for every measurable change.
Silent kinds (``stat_mod``, ``mana``) mutate state without publishing.

Per-target kinds (damage, heal, buff, debuff, move) apply to each target
in turn; cast-scoped kinds (draw, mana) apply once per cast.

Usage::

    from tactics_sim.sim.interpreter import EffectResolver

    resolver = EffectResolver(bus, rng)
    resolver.resolve(card_def, state, caster, targets)
"""

from __future__ import annotations

import logging
from typing import Callable

from tactics_sim.ir.cards import CardDefinition
from tactics_sim.ir.effects import (
    BuffEffect,
    DamageEffect,
    DebuffEffect,
    DrawEffect,
    HealEffect,
    ManaEffect,
    MoveEffect,
    StatModEffect,
)
from tactics_sim.sim.core.entities import Champion, StatModifier
from tactics_sim.sim.core.game_state import MatchState
from tactics_sim.sim.core.rng import GameRNG
from tactics_sim.sim.engine.board import distance, neighbours
from tactics_sim.sim.engine.events import EffectBus, EffectEvent, EffectEventKind

logger = logging.getLogger(__name__)


class EffectResolver:
    """Applies card effects to a :class:`MatchState`.

    The resolver is stateless between calls -- all mutable state lives in
    the ``MatchState`` that is threaded through every resolution.

    Parameters
    ----------
    bus:
        Effect bus that receives one event per measurable change.
    rng:
        Engine RNG stream, used when a draw has to reshuffle the discard
        pile.
    """

    def __init__(self, bus: EffectBus, rng: GameRNG) -> None:
        self._bus = bus
        self._rng = rng

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(
        self,
        card: CardDefinition,
        state: MatchState,
        caster: Champion,
        targets: list[Champion],
    ) -> int:
        """Resolve every effect of *card* in declaration order.

        Parameters
        ----------
        card:
            The card being cast.
        state:
            The current match state (mutated in-place).
        caster:
            The casting champion.
        targets:
            Chosen target champions (empty for ``NONE`` cards).

        Returns
        -------
        int
            Total HP removed from enemies by this cast.
        """
        damage_dealt = 0
        for effect in card.effects:
            handler = _DISPATCH.get(effect.kind)
            if handler is None:
                logger.warning("No handler for effect kind %s", effect.kind)
                continue
            damage_dealt += handler(self, effect, card, state, caster, targets)
        return damage_dealt

    def deal_attack_damage(self, attacker: Champion, target: Champion, amount: int) -> int:
        """Apply basic-attack damage and publish it."""
        hp_lost = target.take_damage(amount)
        self._emit(EffectEventKind.DAMAGE, attacker, target.name, hp_lost)
        return hp_lost

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _damage(self, effect: DamageEffect, card, state, caster, targets) -> int:
        total = 0
        for target in targets:
            if target.is_dead:
                continue
            hp_lost = target.take_damage(effect.amount)
            self._emit(EffectEventKind.DAMAGE, caster, target.name, hp_lost)
            total += hp_lost
        return total

    def _heal(self, effect: HealEffect, card, state, caster, targets) -> int:
        for target in targets:
            restored = target.heal(effect.amount)
            self._emit(EffectEventKind.HEAL, caster, target.name, restored)
        return 0

    def _buff(self, effect: BuffEffect, card, state, caster, targets) -> int:
        for target in targets:
            if target.is_dead or effect.amount == 0:
                continue
            target.add_modifier(StatModifier(
                stat=effect.stat,
                amount=effect.amount,
                turns_remaining=effect.duration,
                source=card.id,
            ))
            self._emit(EffectEventKind.BUFF, caster, target.name, effect.amount)
        return 0

    def _debuff(self, effect: DebuffEffect, card, state, caster, targets) -> int:
        for target in targets:
            if target.is_dead or effect.amount == 0:
                continue
            target.add_modifier(StatModifier(
                stat=effect.stat,
                amount=-effect.amount,
                turns_remaining=effect.duration,
                source=card.id,
            ))
            self._emit(EffectEventKind.DEBUFF, caster, target.name, effect.amount)
        return 0

    def _move(self, effect: MoveEffect, card, state, caster, targets) -> int:
        for target in targets:
            if target.is_dead:
                continue
            if target.name == caster.name:
                enemies = state.enemies_of(caster)
                if not enemies:
                    continue
                reference = min(
                    enemies,
                    key=lambda e: (distance(e.position, caster.position), e.name),
                ).position
            else:
                reference = caster.position
            moved = _shift(state, target, reference, effect.distance, effect.direction)
            self._emit(EffectEventKind.MOVEMENT, caster, target.name, moved)
        return 0

    def _draw(self, effect: DrawEffect, card, state, caster, targets) -> int:
        piles = state.players[caster.owner].piles
        drawn = piles.draw_cards(effect.count, self._rng)
        self._emit(
            EffectEventKind.EFFECT_APPLIED, caster, None, len(drawn), category="draw",
        )
        return 0

    def _stat_mod(self, effect: StatModEffect, card, state, caster, targets) -> int:
        for target in targets or [caster]:
            if target.is_dead:
                continue
            target.stat_mods[effect.stat] = target.stat_mods.get(effect.stat, 0) + effect.amount
        return 0

    def _mana(self, effect: ManaEffect, card, state, caster, targets) -> int:
        own = state.players[caster.owner]
        opponent = state.players[2 if caster.owner == 1 else 1]
        if effect.mode in ("grant", "steal"):
            own.mana += effect.amount
        if effect.mode in ("lock", "steal"):
            opponent.mana_locked += effect.amount
        return 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _emit(
        self,
        kind: EffectEventKind,
        source: Champion,
        target: str | None,
        amount: int,
        category: str | None = None,
    ) -> None:
        # Zero-magnitude changes are not observable.
        if amount <= 0:
            return
        self._bus.publish(EffectEvent(
            kind=kind, source=source.name, target=target, amount=amount, category=category,
        ))


def _shift(
    state: MatchState,
    champion: Champion,
    reference: tuple[int, int],
    steps: int,
    direction: str,
) -> int:
    """Step *champion* up to *steps* tiles toward/away from *reference*.

    Each step takes the first free neighbour that strictly improves the
    distance; movement toward stops once adjacent.  Returns tiles moved.
    """
    moved = 0
    for _ in range(steps):
        current = distance(champion.position, reference)
        if direction == "toward" and current <= 1:
            break
        best = None
        for tile in neighbours(champion.position):
            if state.occupant(tile) is not None:
                continue
            d = distance(tile, reference)
            if (direction == "toward" and d < current) or (direction == "away" and d > current):
                best = tile
                break
        if best is None:
            break
        champion.position = best
        moved += 1
    return moved


_Handler = Callable[..., int]

_DISPATCH: dict[str, _Handler] = {
    "damage": EffectResolver._damage,
    "heal": EffectResolver._heal,
    "buff": EffectResolver._buff,
    "debuff": EffectResolver._debuff,
    "move": EffectResolver._move,
    "draw": EffectResolver._draw,
    "stat_mod": EffectResolver._stat_mod,
    "mana": EffectResolver._mana,
}
