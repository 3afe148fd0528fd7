"""Match state for the headless simulator.

Houses the full mutable state of one match (``MatchState``): both players'
card piles and mana, every champion on the board, the turn/round counters
and the response window.  Card-pile management drives the
draw-discard-reshuffle cycle.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from tactics_sim.sim.core.entities import Champion
from tactics_sim.sim.core.rng import GameRNG


# ---------------------------------------------------------------------------
# CardInstance
# ---------------------------------------------------------------------------

class CardInstance(BaseModel):
    """A single physical card residing in a pile.

    ``id`` is assigned deterministically when the deck is built
    (``"p1-03"``) so recorded actions can reference the exact copy and a
    replay with the same seed resolves to the same copy.
    """

    id: str
    card_id: str
    """References the card definition in the IR."""
    champion: str
    """Champion that owns (and casts) this card."""


# ---------------------------------------------------------------------------
# CardPiles
# ---------------------------------------------------------------------------

class CardPiles(BaseModel):
    """Manages the draw pile, hand and discard pile of one player.

    ``draw_cards`` reshuffles the discard pile back into the draw pile when
    the draw pile runs out.  Every drawn card id is appended to
    ``drawn_log`` for usage statistics.
    """

    deck: list[CardInstance] = Field(default_factory=list)
    hand: list[CardInstance] = Field(default_factory=list)
    discard: list[CardInstance] = Field(default_factory=list)
    drawn_log: list[str] = Field(default_factory=list)

    # -- queries -------------------------------------------------------------

    @property
    def hand_size(self) -> int:
        return len(self.hand)

    def find_in_hand(self, instance_id: str) -> CardInstance | None:
        for card in self.hand:
            if card.id == instance_id:
                return card
        return None

    # -- drawing -------------------------------------------------------------

    def draw_cards(self, n: int, rng: GameRNG) -> list[CardInstance]:
        """Draw up to *n* cards into the hand.

        Returns the list of cards actually drawn (may be fewer than *n*
        if both piles are empty).
        """
        drawn: list[CardInstance] = []
        for _ in range(n):
            if not self.deck:
                if not self.discard:
                    break
                self._reshuffle_discard_into_deck(rng)
            card = self.deck.pop(0)
            self.hand.append(card)
            self.drawn_log.append(card.card_id)
            drawn.append(card)
        return drawn

    def _reshuffle_discard_into_deck(self, rng: GameRNG) -> None:
        self.deck.extend(self.discard)
        self.discard.clear()
        rng.shuffle(self.deck)

    # -- pile movement -------------------------------------------------------

    def move_to_discard(self, card: CardInstance) -> None:
        """Remove *card* from the hand and place it in the discard pile."""
        for i, c in enumerate(self.hand):
            if c.id == card.id:
                self.hand.pop(i)
                self.discard.append(card)
                return
        raise ValueError(f"Card {card.id!r} ({card.card_id}) not found in hand")


# ---------------------------------------------------------------------------
# PlayerState
# ---------------------------------------------------------------------------

class PlayerState(BaseModel):
    """Per-player resources."""

    player: int
    champions: list[str]
    mana: int = 0
    max_mana: int = 3
    mana_locked: int = 0
    """Mana withheld from the player's next turn refill."""
    piles: CardPiles = Field(default_factory=CardPiles)


# ---------------------------------------------------------------------------
# Response window
# ---------------------------------------------------------------------------

class ResponseWindow(BaseModel):
    """An interrupt point where players may react, in priority order.

    The window closes once every player in ``order`` has passed.
    """

    order: list[int]
    passed: list[int] = Field(default_factory=list)

    @property
    def priority(self) -> int | None:
        for player in self.order:
            if player not in self.passed:
                return player
        return None


# ---------------------------------------------------------------------------
# MatchState
# ---------------------------------------------------------------------------

class MatchPhase(str, Enum):
    SETUP = "SETUP"
    MAIN = "MAIN"
    RESPONSE = "RESPONSE"
    ENDED = "ENDED"


class MatchState(BaseModel):
    """Full mutable state of a single match."""

    round: int = 0
    turn: int = 0
    active_player: int = 1
    phase: MatchPhase = MatchPhase.SETUP
    players: dict[int, PlayerState] = Field(default_factory=dict)
    champions: dict[str, Champion] = Field(default_factory=dict)
    response_window: ResponseWindow | None = None

    # -- queries -------------------------------------------------------------

    @property
    def inactive_player(self) -> int:
        return 2 if self.active_player == 1 else 1

    def champions_of(self, player: int) -> list[Champion]:
        return [c for c in self.champions.values() if c.owner == player]

    def living_champions(self, player: int) -> list[Champion]:
        return [c for c in self.champions_of(player) if not c.is_dead]

    def enemies_of(self, champion: Champion) -> list[Champion]:
        other = 2 if champion.owner == 1 else 1
        return self.living_champions(other)

    def total_hp(self, player: int) -> int:
        return sum(max(0, c.current_hp) for c in self.champions_of(player))

    def occupant(self, position: tuple[int, int]) -> Champion | None:
        for champion in self.champions.values():
            if not champion.is_dead and champion.position == position:
                return champion
        return None
