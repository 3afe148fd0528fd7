"""Effect instrumentation -- measures what a card play actually did.

:meth:`EffectInstrumentation.begin` opens a :class:`TrackingWindow` around
one cast.  The window subscribes to the rules engine's effect bus,
accumulates event magnitudes per category and, on :meth:`TrackingWindow.end`,
classifies the play as impactful or no-op.

The window is a context manager: leaving the ``with`` block always detaches
the listener, so a cast that raises cannot leak accumulation into the next
play::

    with instrumentation.begin(card, caster, player, targets) as window:
        engine.cast(player, instance_id, targets)
        outcome = window.end()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tactics_sim.ir.cards import CardDefinition
from tactics_sim.ir.effects import SILENT_EFFECT_KINDS, EffectKind
from tactics_sim.sim.engine.board import distance
from tactics_sim.sim.engine.events import EffectEvent, EffectEventKind, Subscription
from tactics_sim.sim.telemetry import EffectOutcome, NoOpReason

if TYPE_CHECKING:
    from tactics_sim.sim.engine.base import RulesEngine

logger = logging.getLogger(__name__)

_CATEGORY_BY_KIND = {
    EffectEventKind.DAMAGE: "damage",
    EffectEventKind.HEAL: "heal",
    EffectEventKind.BUFF: "buff",
    EffectEventKind.DEBUFF: "debuff",
    EffectEventKind.MOVEMENT: "movement",
}


class TrackingWindow:
    """Accumulates effect events for a single card play.

    Created by :meth:`EffectInstrumentation.begin`; do not instantiate
    directly.
    """

    def __init__(
        self,
        owner: EffectInstrumentation,
        card: CardDefinition,
        caster: str,
        player: int,
        targets: tuple[str, ...],
    ) -> None:
        self._owner = owner
        self.card = card
        self.caster = caster
        self.player = player
        self.targets = tuple(targets)
        self.outcome = EffectOutcome()
        self._subscription: Subscription | None = None

        state = owner.engine.state
        piles = state.players[player].piles
        self.hp_before = {name: c.current_hp for name, c in state.champions.items()}
        self.hand_size_before = piles.hand_size
        self.deck_size_before = len(piles.deck)
        self.discard_size_before = len(piles.discard)
        self.targets_full_hp = bool(self.targets) and all(
            name in state.champions and state.champions[name].is_full_hp
            for name in self.targets
        )
        self.enemies_in_range = self._count_enemies_in_range()

    # -- lifecycle -----------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def _open(self) -> None:
        self._subscription = self._owner.engine.subscribe(self._on_event)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
        if self._owner.current is self:
            self._owner.current = None

    def __enter__(self) -> TrackingWindow:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- accumulation --------------------------------------------------------

    def _on_event(self, event: EffectEvent) -> None:
        category = _CATEGORY_BY_KIND.get(event.kind)
        if category is None:
            if event.kind != EffectEventKind.EFFECT_APPLIED or event.category not in ("draw", "mana"):
                return
            category = event.category
        setattr(self.outcome, category, getattr(self.outcome, category) + event.amount)
        if event.target is not None and event.target not in self.outcome.targets_hit:
            self.outcome.targets_hit.append(event.target)

    # -- classification ------------------------------------------------------

    def end(self) -> EffectOutcome:
        """Close the window and return the classified outcome."""
        self.close()
        outcome = self.outcome
        declared = self.card.effect_kinds
        if declared & SILENT_EFFECT_KINDS:
            outcome.is_noop = False
        else:
            outcome.is_noop = outcome.total == 0
        if outcome.is_noop:
            outcome.noop_reason = self._infer_reason(declared)
        return outcome

    def _infer_reason(self, declared: frozenset[EffectKind]) -> str:
        if EffectKind.DAMAGE in declared and self.enemies_in_range == 0:
            return NoOpReason.NO_VALID_TARGETS
        if EffectKind.HEAL in declared and self.targets_full_hp:
            return NoOpReason.TARGET_FULL_HP
        if EffectKind.DRAW in declared and self.deck_size_before + self.discard_size_before == 0:
            return NoOpReason.DECK_EMPTY
        return NoOpReason.UNKNOWN

    def _count_enemies_in_range(self) -> int:
        state = self._owner.engine.state
        caster = state.champions.get(self.caster)
        if caster is None or caster.is_dead:
            return 0
        reach = self.card.range
        return sum(
            1 for enemy in state.enemies_of(caster)
            if reach is None or distance(caster.position, enemy.position) <= reach
        )


class EffectInstrumentation:
    """Opens tracking windows against one rules engine.

    Parameters
    ----------
    engine:
        The rules engine whose effect bus is observed.
    """

    def __init__(self, engine: RulesEngine) -> None:
        self.engine = engine
        self.current: TrackingWindow | None = None

    def begin(
        self,
        card: CardDefinition,
        caster: str,
        player: int,
        targets: tuple[str, ...] = (),
    ) -> TrackingWindow:
        """Start tracking one cast.

        Any window still open from a previous play is closed first and its
        accumulation discarded.
        """
        if self.current is not None:
            logger.warning(
                "Tracking window for %s was never ended; discarding it",
                self.current.card.id,
            )
            self.current.close()
        window = TrackingWindow(self, card, caster, player, targets)
        window._open()
        self.current = window
        return window
