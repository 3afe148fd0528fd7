"""Configuration models for simulation sessions and single matches.

All models are frozen Pydantic models: a session config is built once (from
CLI flags or a JSON file) and never mutated while matches run.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Difficulty(str, Enum):
    """Named decision-oracle difficulty profiles."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SafetyLimits(BaseModel):
    """Counter-based bounds that keep every match finite.

    Attributes
    ----------
    max_rounds:
        A match ends on the round limit once the round counter exceeds this.
    max_actions_per_turn:
        Actions a single player may take before the turn is forced to end.
    max_consecutive_passes:
        Consecutive turns with zero actions (either side) that count as a
        stalemate.
    max_iterations:
        Hard ceiling on executor loop iterations per match.  Tripping it is
        an error.
    max_response_passes:
        Priority passes allowed while draining one response window.
    """

    model_config = ConfigDict(frozen=True)

    max_rounds: int = Field(default=30, ge=1)
    max_actions_per_turn: int = Field(default=20, ge=1)
    max_consecutive_passes: int = Field(default=6, ge=1)
    max_iterations: int = Field(default=5000, ge=1)
    max_response_passes: int = Field(default=8, ge=1)


class MatchConfig(BaseModel):
    """Inputs for one match.

    Rosters are deliberately not validated here: a malformed roster must
    fail only its own match, so the executor checks them.
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    roster_a: list[str]
    roster_b: list[str]
    p1_difficulty: Difficulty = Difficulty.MEDIUM
    p2_difficulty: Difficulty = Difficulty.MEDIUM
    seed_override: int | None = None


class Matchup(BaseModel):
    """An explicit pairing of two rosters."""

    model_config = ConfigDict(frozen=True)

    roster_a: list[str]
    roster_b: list[str]

    @classmethod
    def parse(cls, text: str) -> Matchup:
        """Parse ``"A,B:C,D"`` into a matchup.

        Raises
        ------
        ValueError
            If *text* does not contain exactly one ``:`` separator.
        """
        sides = text.split(":")
        if len(sides) != 2:
            raise ValueError(f"Matchup must look like 'A,B:C,D', got {text!r}")
        roster_a = [name.strip() for name in sides[0].split(",") if name.strip()]
        roster_b = [name.strip() for name in sides[1].split(",") if name.strip()]
        return cls(roster_a=roster_a, roster_b=roster_b)


class SessionConfig(BaseModel):
    """Immutable inputs for one batch run.

    ``base_seed`` of 0 means "draw a random seed"; the drawn seed is then
    fixed for the whole session and written to the report.

    ``matchup_mode``:

    - ``random``: two disjoint rosters per match from ``champion_pool``
      (all registered champions when empty).
    - ``explicit``: cycle through ``matchups``.
    - ``all_combinations``: every ordered pairing of disjoint rosters,
      cycled until ``match_count`` matches are built.
    """

    model_config = ConfigDict(frozen=True)

    match_count: int = Field(default=100, ge=1)
    base_seed: int = Field(default=0, ge=0)
    p1_difficulty: Difficulty = Difficulty.MEDIUM
    p2_difficulty: Difficulty = Difficulty.MEDIUM
    limits: SafetyLimits = Field(default_factory=SafetyLimits)
    matchup_mode: Literal["random", "explicit", "all_combinations"] = "random"
    matchups: list[Matchup] = Field(default_factory=list)
    champion_pool: list[str] = Field(default_factory=list)
