"""Seeded random number generator for deterministic match simulation.

Wraps Python's random.Random to provide reproducible randomness.  One
``GameRNG`` handle is owned by the session and reseeded before every match;
each consumer inside a match (rules engine, decision oracle) uses a *forked*
stream so that consuming random values in one does not perturb another.
"""

from __future__ import annotations

import hashlib
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class GameRNG:
    """Deterministic RNG that can be forked into independent sub-streams.

    Parameters
    ----------
    seed:
        Integer seed for the underlying Mersenne Twister.
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    # -- public properties ---------------------------------------------------

    @property
    def seed(self) -> int:
        """Return the seed this RNG was last (re)seeded with."""
        return self._seed

    # -- core random methods -------------------------------------------------

    def random_int(self, low: int, high: int) -> int:
        """Return a random integer *N* such that ``low <= N <= high``."""
        return self._rng.randint(low, high)

    def random_float(self) -> float:
        """Return a random float in the half-open interval ``[0.0, 1.0)``."""
        return self._rng.random()

    def random_choice(self, seq: Sequence[T]) -> T:
        """Return a random element from a non-empty sequence."""
        return self._rng.choice(seq)

    def sample(self, seq: Sequence[T], k: int) -> list[T]:
        """Return *k* distinct elements drawn from *seq*."""
        return self._rng.sample(list(seq), k)

    def shuffle(self, lst: list[T]) -> None:
        """Shuffle *lst* in-place."""
        self._rng.shuffle(lst)

    # -- reseeding / forking -------------------------------------------------

    def reseed(self, seed: int) -> None:
        """Reset this handle to a fresh stream for *seed*.

        Used by the seed sequencer immediately before each match so no state
        carries across matches.
        """
        self._seed = seed
        self._rng = random.Random(seed)

    def fork(self, name: str) -> GameRNG:
        """Create a child RNG whose seed is derived from this RNG's seed and
        *name*.

        The derivation is deterministic: forking with the same *name*
        from an RNG with the same seed always produces the same child
        seed.  This lets consumers (e.g. ``"engine"``, ``"oracle"``,
        ``"matchups"``) each have their own independent random stream.
        """
        digest = hashlib.sha256(f"{self._seed}:{name}".encode()).digest()
        child_seed = int.from_bytes(digest[:8], "big")
        return GameRNG(child_seed)

    # -- dunder helpers ------------------------------------------------------

    def __repr__(self) -> str:
        return f"GameRNG(seed={self._seed})"
