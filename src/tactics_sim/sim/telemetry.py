"""Telemetry data models for per-match results.

These lightweight dataclasses capture everything needed to evaluate
balance without storing the full game-state history:

- **ReplayAction**: one executed action with its provenance and result.
- **CardPlayRecord**: one cast and its measured effect (``EffectOutcome``).
- **TurnLog** / **RoundSummary**: per-turn and per-round rollups.
- **MatchResult**: the terminal record of a match.

They are plain ``dataclass`` instances (not Pydantic models) to keep
collection cheap during batch runs; :func:`match_result_to_json` and
:func:`match_result_from_json` go through a Pydantic ``TypeAdapter`` when a
result has to be written to or read from disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import TypeAdapter

from tactics_sim.sim.actions import GameAction
from tactics_sim.sim.config import MatchConfig
from tactics_sim.sim.core.entities import Position


class MatchStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class WinReason:
    """Canonical ``win_reason`` strings."""

    ELIMINATION = "all enemy champions defeated"
    MUTUAL_ELIMINATION = "mutual elimination"
    STALEMATE = "stalemate"
    ROUND_LIMIT_HP = "round limit, HP advantage"
    ROUND_LIMIT_TIE = "round limit, HP tie"
    SETUP_FAILED = "setup failed"
    ITERATION_CEILING = "iteration ceiling reached"
    ENGINE_ERROR = "engine error"


class NoOpReason:
    """Heuristic explanations attached to no-op card plays."""

    NO_VALID_TARGETS = "no valid targets"
    TARGET_FULL_HP = "target full HP"
    DECK_EMPTY = "deck empty"
    UNKNOWN = "unknown reason"


HAND_LIMIT_TAG = "from hand limit"


@dataclass
class EffectOutcome:
    """Measured effect of one card play.

    Attributes
    ----------
    damage, heal, buff, debuff, movement, draw, mana:
        Accumulated magnitude per category.
    targets_hit:
        Champions that received at least one effect event, in first-hit
        order.
    is_noop:
        Whether the play changed nothing measurable.
    noop_reason:
        Best-effort explanation when ``is_noop`` is set.
    """

    damage: int = 0
    heal: int = 0
    buff: int = 0
    debuff: int = 0
    movement: int = 0
    draw: int = 0
    mana: int = 0
    targets_hit: list[str] = field(default_factory=list)
    is_noop: bool = False
    noop_reason: str | None = None

    @property
    def total(self) -> int:
        return (
            self.damage + self.heal + self.buff + self.debuff
            + self.movement + self.draw + self.mana
        )


@dataclass(frozen=True)
class CardPlayRecord:
    """One cast, immutable once recorded."""

    card_id: str
    card_name: str
    caster: str
    player: int
    round: int
    turn: int
    mana_cost: int
    mana_available: int
    targets: tuple[str, ...]
    outcome: EffectOutcome


@dataclass
class ReplayAction:
    """One successfully executed action.

    Attributes
    ----------
    index:
        Position in the match's action log (0-based).
    round, turn, player:
        Provenance.
    action:
        The submitted payload.
    success:
        Engine verdict (always ``True`` for logged actions).
    damage_dealt:
        HP removed by the action (attacks and damaging casts).
    """

    index: int
    round: int
    turn: int
    player: int
    action: GameAction
    success: bool = True
    damage_dealt: int = 0


@dataclass
class DiscardRecord:
    """A card discarded at end of turn."""

    card_id: str
    reason: str = HAND_LIMIT_TAG


@dataclass
class DeathRecord:
    champion: str
    owner: int
    round: int
    turn: int
    killer: str | None = None


@dataclass
class TurnLog:
    """Rollup of one player turn."""

    turn: int
    round: int
    player: int
    mana_start: int
    mana_end: int = 0
    actions: int = 0
    cards_played: list[str] = field(default_factory=list)
    discarded: list[DiscardRecord] = field(default_factory=list)
    end_reason: str = ""


@dataclass
class RoundSummary:
    """Rollup of one round (both players' turns)."""

    round: int
    mana_start: dict[int, int] = field(default_factory=dict)
    actions: dict[int, int] = field(default_factory=dict)
    hp_start: dict[str, int] = field(default_factory=dict)
    hp_end: dict[str, int] = field(default_factory=dict)
    deaths: list[DeathRecord] = field(default_factory=list)


@dataclass
class MatchResult:
    """Terminal record of one match.

    ``winner`` is 0 for a draw (and for failed matches), otherwise the
    winning player number.
    """

    config: MatchConfig
    seed_used: int
    status: MatchStatus = MatchStatus.COMPLETED
    winner: int = 0
    win_reason: str = ""
    total_rounds: int = 0
    total_turns: int = 0
    total_actions: int = 0
    actions: list[ReplayAction] = field(default_factory=list)
    card_plays: list[CardPlayRecord] = field(default_factory=list)
    turns: list[TurnLog] = field(default_factory=list)
    rounds: list[RoundSummary] = field(default_factory=list)
    starting_positions: dict[str, Position] = field(default_factory=dict)
    champion_owners: dict[str, int] = field(default_factory=dict)
    final_hp: dict[str, int] = field(default_factory=dict)
    cards_drawn: dict[str, int] = field(default_factory=dict)
    cards_discarded: dict[str, int] = field(default_factory=dict)
    cards_held: dict[str, int] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status == MatchStatus.FAILED

    @property
    def deaths(self) -> list[DeathRecord]:
        return [death for summary in self.rounds for death in summary.deaths]

    def survivors(self, player: int) -> list[str]:
        return [
            name for name, owner in self.champion_owners.items()
            if owner == player and self.final_hp.get(name, 0) > 0
        ]


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

_MATCH_RESULT_ADAPTER = TypeAdapter(MatchResult)


def match_result_to_json(result: MatchResult, indent: int | None = 2) -> str:
    return _MATCH_RESULT_ADAPTER.dump_json(result, indent=indent).decode()


def match_result_from_json(text: str | bytes) -> MatchResult:
    return _MATCH_RESULT_ADAPTER.validate_json(text)
