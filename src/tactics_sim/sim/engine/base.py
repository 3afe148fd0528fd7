"""Abstract rules-engine interface driven by the match executor.

The executor, the replayer and the decision oracles only talk to a rules
engine through this interface.  All player-facing queries refer to the
*active* player unless a ``player`` argument is given.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tactics_sim.ir.cards import CardDefinition
    from tactics_sim.sim.core.entities import Position
    from tactics_sim.sim.core.game_state import CardInstance, MatchState
    from tactics_sim.sim.engine.events import EffectListener, Subscription


@dataclass(frozen=True)
class AttackOutcome:
    """Result of a basic attack submission."""

    success: bool
    damage: int = 0


class RulesEngine(ABC):
    """Interface every rules engine must implement."""

    # -- setup ---------------------------------------------------------------

    @abstractmethod
    def initialize(self, roster_a: list[str], roster_b: list[str]) -> bool:
        """Deploy both rosters, build and shuffle decks, deal opening hands
        and start player 1's first turn.

        Returns ``False`` when the rosters cannot be set up (unknown
        champion, overlapping rosters, missing card data).
        """

    # -- state ---------------------------------------------------------------

    @property
    @abstractmethod
    def state(self) -> MatchState:
        """Live match state.  Callers must not mutate it."""

    @abstractmethod
    def snapshot(self) -> MatchState:
        """Deep copy of the current match state."""

    @property
    @abstractmethod
    def hand_limit(self) -> int:
        """Maximum cards a player may hold at the end of their turn."""

    @abstractmethod
    def subscribe(self, listener: EffectListener) -> Subscription:
        """Attach *listener* to the engine's effect bus."""

    # -- legality queries ----------------------------------------------------

    @abstractmethod
    def reachable_tiles(self, champion: str) -> list[Position]:
        """Tiles the active player's *champion* may move to this turn."""

    @abstractmethod
    def attack_targets(self, champion: str) -> list[str]:
        """Enemies the active player's *champion* may attack this turn."""

    @abstractmethod
    def cast_targets(self, card: CardDefinition, caster: str) -> list[tuple[str, ...]]:
        """Every legal target set for *card* cast by *caster*."""

    @abstractmethod
    def can_cast(self, player: int, instance_id: str) -> bool:
        """Whether *player* may cast the card copy *instance_id* right now."""

    # -- action submission ---------------------------------------------------

    @abstractmethod
    def move(self, champion: str, destination: Position) -> bool:
        """Move a champion.  Returns ``False`` when the move is illegal."""

    @abstractmethod
    def attack(self, champion: str, target: str) -> AttackOutcome:
        """Perform a basic attack."""

    @abstractmethod
    def cast(self, player: int, instance_id: str, targets: tuple[str, ...]) -> bool:
        """Cast a card from *player*'s hand.  Returns ``False`` when rejected."""

    # -- win condition / response window -------------------------------------

    @abstractmethod
    def check_winner(self) -> int | None:
        """``None`` while both sides stand, else 1, 2 or 0 (both wiped out)."""

    @abstractmethod
    def response_window_open(self) -> bool: ...

    @abstractmethod
    def priority_player(self) -> int | None:
        """Player holding priority in the open response window, if any."""

    @abstractmethod
    def pass_priority(self) -> bool:
        """Pass priority for the priority player.  Returns ``False`` when no
        window is open."""

    # -- turn primitives -----------------------------------------------------

    @abstractmethod
    def discard_from_hand(self, player: int, instance_id: str) -> CardInstance:
        """Move a card copy from *player*'s hand to their discard pile."""

    @abstractmethod
    def expire_modifiers(self) -> int:
        """Count down temporary modifiers on every champion.  Returns the
        number that expired."""

    @abstractmethod
    def start_turn(self, player: int, round_number: int) -> None:
        """Make *player* active, refill mana and reset champion flags."""

    @abstractmethod
    def draw_cards(self, player: int, count: int) -> list[CardInstance]:
        """Draw up to *count* cards for *player*."""
