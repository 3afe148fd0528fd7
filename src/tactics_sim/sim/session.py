"""Session orchestration -- runs a batch of matches and builds the report.

The :class:`SessionOrchestrator` seeds the session, builds the match list,
runs every match sequentially through a :class:`MatchExecutor`, folds each
result into a :class:`StatisticsAggregator` and hands the final counters to
the :class:`ReportCompiler`.

Abort and pause requests are honoured only between matches.  An aborted
session still returns a valid (partial) report.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, TYPE_CHECKING

from tactics_sim.balance.aggregator import StatisticsAggregator
from tactics_sim.balance.report import ReportCompiler
from tactics_sim.sim.config import MatchConfig, SessionConfig
from tactics_sim.sim.core.rng import GameRNG
from tactics_sim.sim.runner import ROSTER_SIZE, MatchExecutor
from tactics_sim.sim.seeding import SeedSequencer

if TYPE_CHECKING:
    from tactics_sim.balance.models import SessionReport
    from tactics_sim.sim.content.registry import ContentRegistry
    from tactics_sim.sim.runner import OracleFactory
    from tactics_sim.sim.telemetry import MatchResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, "MatchResult"], None]


class SessionOrchestrator:
    """Runs every match of a session in order.

    Parameters
    ----------
    registry:
        Content registry shared by every match.
    executor:
        Match executor to use.  By default one is built per session from
        the session's safety limits and *oracle_factory*.
    oracle_factory:
        Oracle factory passed to the default executor.
    progress:
        Called after every match with ``(matches_done, match_count, result)``.
    keep_results:
        Keep every :class:`MatchResult` in :attr:`results` (needed to save
        per-match files).
    """

    def __init__(
        self,
        registry: ContentRegistry,
        executor: MatchExecutor | None = None,
        oracle_factory: OracleFactory | None = None,
        progress: ProgressCallback | None = None,
        keep_results: bool = False,
    ) -> None:
        self.registry = registry
        self.executor = executor
        self.oracle_factory = oracle_factory
        self.progress = progress
        self.keep_results = keep_results

        self.rng = GameRNG(0)
        self.sequencer = SeedSequencer(self.rng)
        self.aggregator: StatisticsAggregator | None = None
        self.results: list[MatchResult] = []
        self.base_seed: int | None = None

        self._abort = threading.Event()
        self._running = threading.Event()
        self._running.set()

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def request_abort(self) -> None:
        """Stop before the next match starts."""
        self._abort.set()
        self._running.set()

    def pause(self) -> None:
        """Hold before the next match until :meth:`resume` is called."""
        self._running.clear()

    def resume(self) -> None:
        self._running.set()

    @property
    def paused(self) -> bool:
        return not self._running.is_set()

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def run_session(self, config: SessionConfig) -> SessionReport:
        """Run every match of *config* and return the session report."""
        base_seed = self.sequencer.set_session_seed(config.base_seed)
        self.base_seed = base_seed
        matches = self.build_matches(config, base_seed)
        executor = self.executor or MatchExecutor(
            self.registry, config.limits, oracle_factory=self.oracle_factory,
        )
        aggregator = StatisticsAggregator(self.registry)
        self.aggregator = aggregator
        self.results = []

        logger.info(
            "Starting session: %d matches, base seed %d, mode %s",
            len(matches), base_seed, config.matchup_mode,
        )
        aborted = False
        for done, match in enumerate(matches):
            self._running.wait()
            if self._abort.is_set():
                aborted = True
                logger.warning("Session aborted after %d of %d matches", done, len(matches))
                break

            aggregator.begin_match(match.roster_a, match.roster_b)
            seed = self.sequencer.apply_match_seed(match.index, match.seed_override)
            result = executor.run(match, seed, self.rng)
            aggregator.record_match_result(result)
            if self.keep_results:
                self.results.append(result)

            logger.info(
                "Match %d/%d: %s vs %s -> winner %d (%s)",
                done + 1, len(matches), "+".join(match.roster_a), "+".join(match.roster_b),
                result.winner, result.win_reason,
            )
            if self.progress is not None:
                self.progress(done + 1, len(matches), result)

        counters = aggregator.counters
        logger.info(
            "Session finished: %d completed, %d failed (P1 %d / P2 %d / draws %d)",
            counters.matches_completed, counters.matches_failed,
            counters.player1_wins, counters.player2_wins, counters.draws,
        )
        return ReportCompiler().compile(aggregator, config, base_seed, aborted=aborted)

    # ------------------------------------------------------------------
    # Match list
    # ------------------------------------------------------------------

    def build_matches(self, config: SessionConfig, base_seed: int) -> list[MatchConfig]:
        """Build the session's match configurations.

        Raises
        ------
        ValueError
            If explicit mode has no matchups or the champion pool is too
            small to field two disjoint rosters.
        """
        if config.matchup_mode == "explicit":
            if not config.matchups:
                raise ValueError("explicit matchup mode needs at least one matchup")
            pairings = [(m.roster_a, m.roster_b) for m in config.matchups]
        else:
            pool = sorted(set(config.champion_pool or self.registry.list_champion_names()))
            if len(pool) < 2 * ROSTER_SIZE:
                raise ValueError(
                    f"champion pool needs at least {2 * ROSTER_SIZE} champions, got {pool}"
                )
            if config.matchup_mode == "all_combinations":
                pairings = _all_pairings(pool)
            else:
                pairings = _random_pairings(pool, config.match_count, GameRNG(base_seed).fork("matchups"))

        cycle = itertools.cycle(pairings)
        return [
            MatchConfig(
                index=index,
                roster_a=list(roster_a),
                roster_b=list(roster_b),
                p1_difficulty=config.p1_difficulty,
                p2_difficulty=config.p2_difficulty,
            )
            for index, (roster_a, roster_b) in zip(range(config.match_count), cycle)
        ]


def _random_pairings(pool: list[str], count: int, rng: GameRNG) -> list[tuple[list[str], list[str]]]:
    pairings = []
    for _ in range(count):
        picks = rng.sample(pool, 2 * ROSTER_SIZE)
        pairings.append((picks[:ROSTER_SIZE], picks[ROSTER_SIZE:]))
    return pairings


def _all_pairings(pool: list[str]) -> list[tuple[list[str], list[str]]]:
    rosters = [list(r) for r in itertools.combinations(pool, ROSTER_SIZE)]
    return [
        (a, b)
        for a in rosters
        for b in rosters
        if a != b and not set(a) & set(b)
    ]
