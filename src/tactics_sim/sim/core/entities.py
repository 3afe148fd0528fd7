"""Entity models for the headless match simulator.

All data classes use Pydantic v2 BaseModel for validation and
serialization.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from tactics_sim.ir.effects import Stat

Position = tuple[int, int]


# ---------------------------------------------------------------------------
# StatModifier
# ---------------------------------------------------------------------------

class StatModifier(BaseModel):
    """A temporary buff (positive ``amount``) or debuff (negative ``amount``)."""

    stat: Stat
    amount: int
    turns_remaining: int
    """Turn ends left before the modifier expires."""
    source: str | None = None
    """Card id that applied the modifier."""

    @property
    def is_buff(self) -> bool:
        return self.amount > 0


# ---------------------------------------------------------------------------
# Champion
# ---------------------------------------------------------------------------

class Champion(BaseModel):
    """A champion on the board."""

    name: str
    owner: int
    """Player number (1 or 2)."""

    max_hp: int
    current_hp: int
    attack: int
    defense: int
    move: int
    range: int
    position: Position

    modifiers: list[StatModifier] = Field(default_factory=list)
    stat_mods: dict[Stat, int] = Field(default_factory=dict)
    """Permanent stat changes from STAT_MOD effects."""

    has_moved: bool = False
    has_attacked: bool = False

    # -- queries -------------------------------------------------------------

    @property
    def is_dead(self) -> bool:
        return self.current_hp <= 0

    @property
    def is_full_hp(self) -> bool:
        return self.current_hp >= self.max_hp

    @property
    def buffs(self) -> list[StatModifier]:
        return [m for m in self.modifiers if m.is_buff]

    @property
    def debuffs(self) -> list[StatModifier]:
        return [m for m in self.modifiers if not m.is_buff]

    def effective(self, stat: Stat) -> int:
        """Return the stat value after permanent and temporary modifiers."""
        base = getattr(self, stat.value)
        total = base + self.stat_mods.get(stat, 0)
        total += sum(m.amount for m in self.modifiers if m.stat == stat)
        floor = 1 if stat == Stat.RANGE else 0
        return max(floor, total)

    # -- damage / heal -------------------------------------------------------

    def take_damage(self, amount: int) -> int:
        """Apply *amount* damage.  Returns the HP actually lost."""
        if amount <= 0 or self.is_dead:
            return 0
        hp_lost = min(self.current_hp, amount)
        self.current_hp -= hp_lost
        return hp_lost

    def heal(self, amount: int) -> int:
        """Heal up to *amount* HP, capped at ``max_hp``.  Returns HP restored."""
        if amount <= 0 or self.is_dead:
            return 0
        restored = min(amount, self.max_hp - self.current_hp)
        self.current_hp += restored
        return restored

    # -- modifiers -----------------------------------------------------------

    def add_modifier(self, modifier: StatModifier) -> None:
        self.modifiers.append(modifier)

    def tick_modifiers(self) -> int:
        """Count down every temporary modifier by one turn end.

        Returns the number of modifiers that expired.
        """
        kept: list[StatModifier] = []
        expired = 0
        for modifier in self.modifiers:
            modifier.turns_remaining -= 1
            if modifier.turns_remaining > 0:
                kept.append(modifier)
            else:
                expired += 1
        self.modifiers = kept
        return expired

    def reset_turn_flags(self) -> None:
        self.has_moved = False
        self.has_attacked = False
