"""Content registry -- loads and serves champion and card definitions.

Content ships as JSON files inside the package (``tactics_sim/data/``).
Card effect lists are validated into tagged effect variants at load time so
the simulator never re-interprets raw dicts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from tactics_sim.ir.cards import CardDefinition
from tactics_sim.ir.champions import ChampionDefinition

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).resolve().parents[2] / "data"  # sim/content -> tactics_sim
_DEFAULT_CARDS_PATH = _DATA_DIR / "cards.json"
_DEFAULT_CHAMPIONS_PATH = _DATA_DIR / "champions.json"


def _read_entries(path: Path) -> list[dict[str, Any]]:
    with open(path) as f:
        raw: list[dict[str, Any]] = json.load(f)
    # Skip organizational section markers
    return [entry for entry in raw if "_section" not in entry]


class ContentRegistry:
    """Loads and serves champion and card definitions.

    The registry is the single source of truth for static content during
    simulation.

    Usage::

        registry = ContentRegistry.default()

        card = registry.get_card("smash")
        brute = registry.get_champion("Brute")
    """

    def __init__(self) -> None:
        self.cards: dict[str, CardDefinition] = {}
        self.champions: dict[str, ChampionDefinition] = {}

    @classmethod
    def default(cls) -> ContentRegistry:
        """Return a registry with the bundled champions and cards loaded."""
        registry = cls()
        registry.load_cards()
        registry.load_champions()
        return registry

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_cards(self, path: str | Path | None = None) -> None:
        """Load card definitions from a JSON file.

        Parameters
        ----------
        path:
            Path to the JSON file.  Defaults to the bundled
            ``data/cards.json``.
        """
        path = Path(path) if path is not None else _DEFAULT_CARDS_PATH
        for raw in _read_entries(path):
            card = CardDefinition.model_validate(raw)
            self.cards[card.id] = card
        logger.debug("Loaded %d cards from %s", len(self.cards), path)

    def load_champions(self, path: str | Path | None = None) -> None:
        """Load champion definitions from a JSON file.

        Parameters
        ----------
        path:
            Path to the JSON file.  Defaults to the bundled
            ``data/champions.json``.
        """
        path = Path(path) if path is not None else _DEFAULT_CHAMPIONS_PATH
        for raw in _read_entries(path):
            champion = ChampionDefinition.model_validate(raw)
            self.champions[champion.name] = champion
        logger.debug("Loaded %d champions from %s", len(self.champions), path)

    def add_card(self, card: CardDefinition) -> None:
        """Register a card, replacing any existing card with the same id."""
        self.cards[card.id] = card

    def add_champion(self, champion: ChampionDefinition) -> None:
        """Register a champion, replacing any existing one with the same name."""
        self.champions[champion.name] = champion

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_card(self, card_id: str) -> CardDefinition | None:
        """Return the :class:`CardDefinition` for *card_id*, or ``None``."""
        return self.cards.get(card_id)

    def get_champion(self, name: str) -> ChampionDefinition | None:
        """Return the :class:`ChampionDefinition` for *name*, or ``None``."""
        return self.champions.get(name)

    def list_champion_names(self) -> list[str]:
        """Return all registered champion names in sorted order."""
        return sorted(self.champions)

    def get_champion_deck(self, name: str) -> list[str]:
        """Return the card ids a champion contributes to a deck.

        Raises
        ------
        KeyError
            If *name* is not a registered champion.
        """
        champion = self.get_champion(name)
        if champion is None:
            raise KeyError(f"Unknown champion: {name!r}")
        return list(champion.cards)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> list[str]:
        """Return a list of cross-reference problems (empty when consistent).

        Checks that every card a champion lists exists and is owned by that
        champion.
        """
        problems: list[str] = []
        for champion in self.champions.values():
            for card_id in champion.cards:
                card = self.get_card(card_id)
                if card is None:
                    problems.append(
                        f"{champion.name}: unknown card {card_id!r}"
                    )
                elif card.champion != champion.name:
                    problems.append(
                        f"{champion.name}: card {card_id!r} belongs to {card.champion!r}"
                    )
        return problems
