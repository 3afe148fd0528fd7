"""Batch entry point: run a self-play session and write the balance report.

Usage:
    tactics-sim [--matches 200] [--seed 12345] [--output results/]
                [--matchup Brute,Ranger:Beast,Shaman ...] [--all-combinations]
                [--config session.json] [--save-matches] [--charts] [-v]

Exit code is 1 if any match recorded an error, 0 otherwise.
"""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Any, Sequence

from pydantic import ValidationError

from tactics_sim.balance.report import generate_text_report, save_match_results, save_report
from tactics_sim.sim.config import Difficulty, Matchup, SessionConfig
from tactics_sim.sim.content.registry import ContentRegistry
from tactics_sim.sim.core.rng import GameRNG
from tactics_sim.sim.oracles.random_oracle import RandomOracle
from tactics_sim.sim.session import SessionOrchestrator

logger = logging.getLogger(__name__)

_DIFFICULTIES = [d.value for d in Difficulty]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tactics-sim",
        description="Run AI-vs-AI matches and report balance statistics",
    )
    parser.add_argument("--matches", type=int, default=None, help="Number of matches (default 100)")
    parser.add_argument("--seed", type=int, default=None, help="Base seed (0 = random)")
    parser.add_argument("--output", type=str, default="results", help="Output directory")
    parser.add_argument("--p1-difficulty", choices=_DIFFICULTIES, default=None)
    parser.add_argument("--p2-difficulty", choices=_DIFFICULTIES, default=None)
    parser.add_argument(
        "--matchup", action="append", default=[], metavar="A,B:C,D",
        help="Explicit matchup (repeatable); matches cycle through them",
    )
    parser.add_argument(
        "--all-combinations", action="store_true",
        help="Cycle through every pairing of disjoint rosters",
    )
    parser.add_argument("--max-rounds", type=int, default=None, help="Round limit per match")
    parser.add_argument("--config", type=str, default=None, help="Session config JSON file")
    parser.add_argument(
        "--oracle", choices=["heuristic", "random"], default="heuristic",
        help="Decision oracle for both players",
    )
    parser.add_argument("--save-matches", action="store_true", help="Write per-match JSON files")
    parser.add_argument("--charts", action="store_true", help="Render balance charts (PNG)")
    parser.add_argument("--json-only", action="store_true", help="Skip the text report")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def build_config(args: argparse.Namespace) -> SessionConfig:
    """Merge the optional config file with command-line overrides.

    Raises
    ------
    ValueError
        On a malformed ``--matchup`` value.
    pydantic.ValidationError
        If the merged configuration is invalid.
    """
    data: dict[str, Any] = {}
    if args.config:
        data = SessionConfig.model_validate_json(Path(args.config).read_text()).model_dump()

    if args.matches is not None:
        data["match_count"] = args.matches
    if args.seed is not None:
        data["base_seed"] = args.seed
    if args.p1_difficulty is not None:
        data["p1_difficulty"] = args.p1_difficulty
    if args.p2_difficulty is not None:
        data["p2_difficulty"] = args.p2_difficulty
    if args.max_rounds is not None:
        limits = dict(data.get("limits") or {})
        limits["max_rounds"] = args.max_rounds
        data["limits"] = limits
    if args.matchup:
        data["matchups"] = [Matchup.parse(text).model_dump() for text in args.matchup]
        data["matchup_mode"] = "explicit"
    if args.all_combinations:
        data["matchup_mode"] = "all_combinations"
    return SessionConfig.model_validate(data)


def _random_oracle(registry: ContentRegistry, rng: GameRNG) -> RandomOracle:
    return RandomOracle(rng)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = build_config(args)
    except (ValueError, ValidationError, OSError) as exc:
        parser.error(str(exc))

    registry = ContentRegistry.default()
    problems = registry.validate()
    for problem in problems:
        logger.warning("Content problem: %s", problem)

    oracle_factory = None
    if args.oracle == "random":
        oracle_factory = _random_oracle

    orchestrator = SessionOrchestrator(
        registry,
        oracle_factory=oracle_factory,
        keep_results=args.save_matches,
    )

    print(f"Running {config.match_count:,} matches...")
    t0 = time.perf_counter()
    try:
        report = orchestrator.run_session(config)
    except ValueError as exc:
        parser.error(str(exc))
    elapsed = time.perf_counter() - t0
    print(f"Done in {elapsed:.1f}s (base seed {orchestrator.base_seed})")

    out_dir = Path(args.output)
    for path in save_report(report, out_dir, json_only=args.json_only):
        print(f"Saved {path}")
    if args.save_matches:
        save_match_results(orchestrator.results, out_dir)
        print(f"Saved {len(orchestrator.results)} match files to {out_dir / 'matches'}")
    if args.charts:
        from tactics_sim.balance.charts import generate_charts

        print(f"Saved {generate_charts(report, out_dir)}")

    if not args.json_only:
        print()
        print(generate_text_report(report))

    return 1 if report.summary.errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
