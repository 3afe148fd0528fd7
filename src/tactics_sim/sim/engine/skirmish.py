"""Reference rules engine: two-versus-two skirmish on a 7x7 grid.

Rules in brief:

- Each player fields two champions.  Decks are built from the cards the
  fielded champions own; every copy gets a deterministic instance id
  (``"p1-03"``).  Opening hands are four cards.
- On their turn a player may move each champion once (breadth-first
  through empty tiles, up to its effective ``move``), attack once per
  champion (enemy within effective ``range``; damage is
  ``max(1, attack - defense)``) and cast any affordable ACTION cards.
- Mana refills at the start of each turn, ramping from 3 by one per
  round up to 6, minus any mana locked by the opponent.
- When a turn starts and the waiting player holds an affordable RESPONSE
  card, a response window opens.  Actions are rejected until every player
  in the window has passed priority.
- A side loses when both its champions are dead.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tactics_sim.ir.cards import CardDefinition, CardTarget, CardType
from tactics_sim.ir.effects import Stat
from tactics_sim.sim.core.entities import Champion, Position
from tactics_sim.sim.core.game_state import (
    CardInstance,
    MatchPhase,
    MatchState,
    PlayerState,
    ResponseWindow,
)
from tactics_sim.sim.core.rng import GameRNG
from tactics_sim.sim.engine.base import AttackOutcome, RulesEngine
from tactics_sim.sim.engine.board import STARTING_TILES, distance, reachable
from tactics_sim.sim.engine.events import EffectBus, EffectListener, Subscription
from tactics_sim.sim.interpreter import EffectResolver

if TYPE_CHECKING:
    from tactics_sim.sim.content.registry import ContentRegistry

logger = logging.getLogger(__name__)

OPENING_HAND = 4
HAND_LIMIT = 7
BASE_MANA = 3
MANA_CAP = 6


class SkirmishEngine(RulesEngine):
    """Headless reference implementation of :class:`RulesEngine`.

    Parameters
    ----------
    registry:
        Content registry providing champion and card definitions.
    rng:
        Engine random stream (deck shuffles, reshuffles).
    """

    def __init__(self, registry: ContentRegistry, rng: GameRNG) -> None:
        self.registry = registry
        self.rng = rng
        self.bus = EffectBus()
        self.resolver = EffectResolver(self.bus, rng)
        self._state = MatchState()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def initialize(self, roster_a: list[str], roster_b: list[str]) -> bool:
        names = list(roster_a) + list(roster_b)
        if len(set(names)) != len(names):
            logger.debug("Rosters overlap: %s vs %s", roster_a, roster_b)
            return False

        state = MatchState()
        for player, roster in ((1, roster_a), (2, roster_b)):
            if len(roster) != len(STARTING_TILES[player]):
                return False
            player_state = PlayerState(player=player, champions=list(roster))
            deck: list[CardInstance] = []
            for name, tile in zip(roster, STARTING_TILES[player]):
                definition = self.registry.get_champion(name)
                if definition is None:
                    logger.debug("Unknown champion %r", name)
                    return False
                state.champions[name] = Champion(
                    name=name,
                    owner=player,
                    max_hp=definition.max_hp,
                    current_hp=definition.max_hp,
                    attack=definition.attack,
                    defense=definition.defense,
                    move=definition.move,
                    range=definition.range,
                    position=tile,
                )
                for card_id in definition.cards:
                    if self.registry.get_card(card_id) is None:
                        logger.debug("Champion %s lists unknown card %r", name, card_id)
                        return False
                    deck.append(CardInstance(
                        id=f"p{player}-{len(deck):02d}",
                        card_id=card_id,
                        champion=name,
                    ))
            self.rng.shuffle(deck)
            player_state.piles.deck = deck
            state.players[player] = player_state

        self._state = state
        for player in (1, 2):
            self.draw_cards(player, OPENING_HAND)
        self.start_turn(1, 1)
        return True

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> MatchState:
        return self._state

    def snapshot(self) -> MatchState:
        return self._state.model_copy(deep=True)

    @property
    def hand_limit(self) -> int:
        return HAND_LIMIT

    def subscribe(self, listener: EffectListener) -> Subscription:
        return self.bus.subscribe(listener)

    # ------------------------------------------------------------------
    # Legality queries
    # ------------------------------------------------------------------

    def reachable_tiles(self, champion: str) -> list[Position]:
        unit = self._active_unit(champion)
        if unit is None or unit.has_moved or self.response_window_open():
            return []
        blocked = [
            c.position for c in self._state.champions.values()
            if not c.is_dead and c.name != unit.name
        ]
        return reachable(unit.position, unit.effective(Stat.MOVE), blocked)

    def attack_targets(self, champion: str) -> list[str]:
        unit = self._active_unit(champion)
        if unit is None or unit.has_attacked or self.response_window_open():
            return []
        if unit.effective(Stat.ATTACK) <= 0:
            return []
        reach = unit.effective(Stat.RANGE)
        return [
            enemy.name for enemy in self._state.enemies_of(unit)
            if distance(unit.position, enemy.position) <= reach
        ]

    def cast_targets(self, card: CardDefinition, caster: str) -> list[tuple[str, ...]]:
        unit = self._state.champions.get(caster)
        if unit is None or unit.is_dead:
            return []
        if card.target == CardTarget.NONE:
            return [()]
        if card.target == CardTarget.SELF:
            return [(unit.name,)]

        def in_range(other: Champion) -> bool:
            return card.range is None or distance(unit.position, other.position) <= card.range

        if card.target == CardTarget.ALL_ENEMIES:
            return [tuple(e.name for e in self._state.enemies_of(unit) if in_range(e))]
        if card.target == CardTarget.ENEMY:
            pool = self._state.enemies_of(unit)
        else:
            pool = self._state.living_champions(unit.owner)
        return [(c.name,) for c in pool if in_range(c)]

    def can_cast(self, player: int, instance_id: str) -> bool:
        player_state = self._state.players.get(player)
        if player_state is None or self._state.phase == MatchPhase.ENDED:
            return False
        instance = player_state.piles.find_in_hand(instance_id)
        if instance is None:
            return False
        card = self.registry.get_card(instance.card_id)
        if card is None or card.cost > player_state.mana:
            return False
        if self.response_window_open():
            if card.type != CardType.RESPONSE or self.priority_player() != player:
                return False
        elif card.type != CardType.ACTION or player != self._state.active_player:
            return False
        return bool(self.cast_targets(card, instance.champion))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def move(self, champion: str, destination: Position) -> bool:
        destination = tuple(destination)
        if destination not in self.reachable_tiles(champion):
            return False
        unit = self._state.champions[champion]
        unit.position = destination
        unit.has_moved = True
        logger.debug("%s moved to %s", champion, destination)
        return True

    def attack(self, champion: str, target: str) -> AttackOutcome:
        if target not in self.attack_targets(champion):
            return AttackOutcome(success=False)
        unit = self._state.champions[champion]
        victim = self._state.champions[target]
        attack_value = unit.effective(Stat.ATTACK)
        damage = max(1, attack_value - victim.effective(Stat.DEFENSE))
        hp_lost = self.resolver.deal_attack_damage(unit, victim, damage)
        unit.has_attacked = True
        logger.debug("%s attacked %s for %d", champion, target, hp_lost)
        self._check_end()
        return AttackOutcome(success=True, damage=hp_lost)

    def cast(self, player: int, instance_id: str, targets: tuple[str, ...]) -> bool:
        if not self.can_cast(player, instance_id):
            return False
        player_state = self._state.players[player]
        instance = player_state.piles.find_in_hand(instance_id)
        card = self.registry.get_card(instance.card_id)
        targets = tuple(targets)
        if targets not in self.cast_targets(card, instance.champion):
            return False

        player_state.mana -= card.cost
        player_state.piles.move_to_discard(instance)
        caster = self._state.champions[instance.champion]
        chosen = [self._state.champions[name] for name in targets]
        self.resolver.resolve(card, self._state, caster, chosen)
        logger.debug("Player %d cast %s (%s) on %s", player, card.id, instance_id, targets)
        self._check_end()
        return True

    # ------------------------------------------------------------------
    # Win condition / response window
    # ------------------------------------------------------------------

    def check_winner(self) -> int | None:
        alive_1 = bool(self._state.living_champions(1))
        alive_2 = bool(self._state.living_champions(2))
        if alive_1 and alive_2:
            return None
        if alive_1:
            return 1
        if alive_2:
            return 2
        return 0

    def response_window_open(self) -> bool:
        return self._state.response_window is not None

    def priority_player(self) -> int | None:
        window = self._state.response_window
        return window.priority if window is not None else None

    def pass_priority(self) -> bool:
        window = self._state.response_window
        if window is None:
            return False
        player = window.priority
        if player is not None:
            window.passed.append(player)
        if window.priority is None:
            self._state.response_window = None
            if self._state.phase == MatchPhase.RESPONSE:
                self._state.phase = MatchPhase.MAIN
        return True

    # ------------------------------------------------------------------
    # Turn primitives
    # ------------------------------------------------------------------

    def discard_from_hand(self, player: int, instance_id: str) -> CardInstance:
        piles = self._state.players[player].piles
        instance = piles.find_in_hand(instance_id)
        if instance is None:
            raise ValueError(f"Card {instance_id!r} not in player {player}'s hand")
        piles.move_to_discard(instance)
        return instance

    def expire_modifiers(self) -> int:
        return sum(c.tick_modifiers() for c in self._state.champions.values())

    def start_turn(self, player: int, round_number: int) -> None:
        state = self._state
        state.active_player = player
        state.round = round_number
        state.turn += 1

        player_state = state.players[player]
        player_state.max_mana = min(MANA_CAP, BASE_MANA + round_number - 1)
        player_state.mana = max(0, player_state.max_mana - player_state.mana_locked)
        player_state.mana_locked = 0
        for champion in state.champions_of(player):
            champion.reset_turn_flags()

        state.phase = MatchPhase.MAIN
        state.response_window = None
        waiting = state.inactive_player
        if self._holds_response(waiting):
            state.response_window = ResponseWindow(order=[waiting, player])
            state.phase = MatchPhase.RESPONSE

    def draw_cards(self, player: int, count: int) -> list[CardInstance]:
        return self._state.players[player].piles.draw_cards(count, self.rng)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _active_unit(self, name: str) -> Champion | None:
        unit = self._state.champions.get(name)
        if unit is None or unit.is_dead or unit.owner != self._state.active_player:
            return None
        if self._state.phase == MatchPhase.ENDED:
            return None
        return unit

    def _holds_response(self, player: int) -> bool:
        player_state = self._state.players[player]
        for instance in player_state.piles.hand:
            card = self.registry.get_card(instance.card_id)
            if card is None or card.type != CardType.RESPONSE:
                continue
            if card.cost <= player_state.mana and self.cast_targets(card, instance.champion):
                return True
        return False

    def _check_end(self) -> None:
        if self.check_winner() is not None:
            self._state.phase = MatchPhase.ENDED
            self._state.response_window = None
