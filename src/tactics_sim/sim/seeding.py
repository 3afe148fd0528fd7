"""Session-level seed management.

A :class:`SeedSequencer` turns one session base seed into a reproducible
seed per match index, so any single match can be re-run in isolation with
the same outcome.
"""

from __future__ import annotations

import logging
import random

from tactics_sim.sim.core.rng import GameRNG

logger = logging.getLogger(__name__)

SEED_POOL_SIZE = 1024
_SEED_BITS = 31
_SELF_CHECK_DRAWS = 16


class SeedDeterminismError(RuntimeError):
    """Raised when reseeding does not reproduce an identical draw sequence."""


class SeedSequencer:
    """Derives per-match seeds from a session base seed.

    Parameters
    ----------
    rng:
        The session-owned RNG handle that is reseeded before every match.
        A fresh handle is created when omitted.
    """

    def __init__(self, rng: GameRNG | None = None) -> None:
        self.rng = rng if rng is not None else GameRNG(0)
        self.base_seed: int | None = None
        self._pool: list[int] = []
        self._pool_rng: random.Random | None = None

    # ------------------------------------------------------------------
    # Session seed
    # ------------------------------------------------------------------

    def set_session_seed(self, seed: int | None = None) -> int:
        """Fix the session base seed and pre-derive the match seed pool.

        ``None`` or ``0`` draws a fresh base seed from the OS entropy source.

        Returns
        -------
        int
            The base seed in effect.

        Raises
        ------
        SeedDeterminismError
            If the reproducibility self-check fails.
        """
        if not seed:
            seed = random.SystemRandom().randint(1, 2**_SEED_BITS - 1)
            logger.info("No session seed given; drew base seed %d", seed)
        self.base_seed = seed
        self._pool_rng = random.Random(seed)
        self._pool = [self._next_pool_seed() for _ in range(SEED_POOL_SIZE)]
        self.verify_reproducible()
        return seed

    @property
    def pool_size(self) -> int:
        return len(self._pool)

    # ------------------------------------------------------------------
    # Per-match seeds
    # ------------------------------------------------------------------

    def get_match_seed(self, index: int) -> int:
        """Return the seed for match *index*.

        The pool is extended from the same generator when *index* is past
        its end; it is never re-seeded.
        """
        if self._pool_rng is None:
            raise RuntimeError("set_session_seed() must be called first")
        if index < 0:
            raise ValueError(f"Match index must be non-negative, got {index}")
        while index >= len(self._pool):
            self._pool.append(self._next_pool_seed())
        return self._pool[index]

    def apply_match_seed(self, index: int, override: int | None = None) -> int:
        """Reseed the session RNG handle for match *index*.

        Parameters
        ----------
        index:
            Match index within the session.
        override:
            Explicit seed that wins over the pool (``MatchConfig.seed_override``).

        Returns
        -------
        int
            The seed the handle now carries.
        """
        seed = override if override is not None else self.get_match_seed(index)
        self.rng.reseed(seed)
        logger.debug("Match %d seeded with %d", index, seed)
        return seed

    # ------------------------------------------------------------------
    # Self-check
    # ------------------------------------------------------------------

    def verify_reproducible(self) -> None:
        """Check that reseeding reproduces an identical draw sequence.

        Raises
        ------
        SeedDeterminismError
            On any mismatch.
        """
        probe_seed = self.get_match_seed(0)
        first = GameRNG(probe_seed)
        first_draws = [first.random_int(0, 2**_SEED_BITS) for _ in range(_SELF_CHECK_DRAWS)]
        second = GameRNG(probe_seed + 1)
        second.reseed(probe_seed)
        second_draws = [second.random_int(0, 2**_SEED_BITS) for _ in range(_SELF_CHECK_DRAWS)]
        if first_draws != second_draws:
            raise SeedDeterminismError(
                f"Reseeding with {probe_seed} did not reproduce the draw sequence"
            )

    def _next_pool_seed(self) -> int:
        return self._pool_rng.randint(1, 2**_SEED_BITS - 1)
