"""
triviagen: generate one daily trivia game from the clue archive.

Without ANTHROPIC_API_KEY (or with --no-llm) clues are screened with local
pattern heuristics only; with it, Claude classifies and rewrites them.

Usage:
    triviagen                       # next free date on or after today
    triviagen --date 2026-10-20     # that date; no-op if it already has a game
    triviagen --seed 42 --dry-run   # reproducible run, print JSON, write nothing
"""

import argparse
import json
import logging
import random
import sys
from datetime import date
from pathlib import Path

from triviagen.config import Settings
from triviagen.eligibility import EligibilityFilter, HeuristicClassifier
from triviagen.errors import TriviaGenError
from triviagen.generator import GameGenerator
from triviagen.llm import ClaudeClassifier, ClaudeClient, ClaudeRewriter, Pacer, build_client
from triviagen.log import setup_logging
from triviagen.store import ClueStore, GameStore


def iso_date(value: str) -> str:
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date (YYYY-MM-DD): {value!r}") from None


def positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return n


def build_filter(settings: Settings, use_llm: bool, log: logging.Logger) -> EligibilityFilter:
    """Pick the classifier/rewriter pair once for the whole run."""
    if not use_llm:
        return EligibilityFilter.heuristic()
    if not settings.llm_enabled:
        log.warning("ANTHROPIC_API_KEY not set. LLM filtering and rewriting will be skipped.")
        return EligibilityFilter.heuristic()

    client = build_client(settings.api_key, settings.call_timeout, settings.max_retries)
    claude = ClaudeClient(client, settings.model, Pacer(settings.call_delay))
    log.info(f"Using {settings.model} for filtering ({settings.workers} worker(s))")
    return EligibilityFilter(
        ClaudeClassifier(claude),
        ClaudeRewriter(claude),
        HeuristicClassifier(),
        workers=settings.workers,
    )


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate a daily trivia game from the clue archive"
    )
    parser.add_argument(
        "--date", type=iso_date, metavar="YYYY-MM-DD",
        help="Generate for this date (default: next date without a game)"
    )
    parser.add_argument(
        "--data-dir", type=Path,
        help="Directory holding the archive, ledger and games (default: ./data)"
    )
    parser.add_argument("--archive", type=Path, help="Clue archive JSON file")
    parser.add_argument("--used", type=Path, help="Used-questions ledger JSON file")
    parser.add_argument("--games-dir", type=Path, help="Directory for game files")
    parser.add_argument(
        "--seed", type=int,
        help="Random seed for reproducible generation (default: random)"
    )
    parser.add_argument(
        "--workers", type=positive_int,
        help="Parallel classifier calls (default: 1)"
    )
    parser.add_argument(
        "--no-llm", action="store_true",
        help="Use local heuristics even if ANTHROPIC_API_KEY is set"
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Print the game JSON instead of saving it"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Show detailed progress"
    )
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> int:
    try:
        settings = Settings.from_env().with_overrides(
            data_dir=args.data_dir,
            archive_file=args.archive,
            used_file=args.used,
            games_dir=args.games_dir,
            workers=args.workers,
        )
    except TriviaGenError as e:
        print(f"Error generating game: {e}", file=sys.stderr)
        return 1

    log = setup_logging(args.verbose, settings.log_file)

    seed = args.seed if args.seed is not None else random.randint(0, 2**31 - 1)
    log.info(f"Using random seed: {seed}")

    try:
        clues = ClueStore.load(settings.archive_path, settings.used_path)
        games = GameStore(settings.games_path)
        generator = GameGenerator(
            clues, games,
            build_filter(settings, not args.no_llm, log),
            rng=random.Random(seed),
        )
        result = generator.generate(args.date, persist=not args.dry_run)
    except (TriviaGenError, OSError) as e:
        print(f"Error generating game: {e}", file=sys.stderr)
        return 1

    if args.dry_run and result.game is not None:
        print(json.dumps(result.game.to_dict(), indent=2, ensure_ascii=False))
        return 0
    if result.created:
        log.info(f"Successfully generated {result.game_id}")
    print(result.game_id)
    return 0


def main(argv=None) -> None:
    sys.exit(run(parse_args(argv)))


if __name__ == "__main__":
    main()
