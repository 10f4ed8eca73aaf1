"""Command-line entry point: rank grants for one user against Supabase.

Usage:
    python -m grant_recommender.main --user-id USER [--limit 20] [--offset 0]
        [--min-score 0.3] [--include-overdue]

Prints the RecommendationResult as JSON on stdout. Exit codes:
0 success, 1 configuration/backend error, 2 invalid request,
3 preferences not found.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import load_config
from .database import SupabaseClient
from .exceptions import InvalidRequestError, PreferencesNotFoundError
from .recommender import RecommendationEngine

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    # stdout carries the JSON result
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rank grant opportunities for a user")
    parser.add_argument("--user-id", required=True, help="User to rank grants for")
    parser.add_argument("--limit", type=int, default=None, help="Page size")
    parser.add_argument("--offset", type=int, default=0, help="Qualifying grants to skip")
    parser.add_argument("--min-score", type=float, default=None, help="Minimum recommendation score")
    parser.add_argument(
        "--include-overdue",
        action="store_true",
        help="Keep grants whose deadline has passed",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
        config.require_backend()
    except ValueError as e:
        _configure_logging("INFO")
        logger.error("Configuration error: %s", e)
        return 1

    _configure_logging(config.log_level)

    try:
        backend = SupabaseClient(config.supabase_url, config.supabase_key)
    except Exception as e:
        logger.error("Backend error: %s", e)
        return 1

    engine = RecommendationEngine(
        preference_source=backend,
        candidate_source=backend,
        similarity_source=backend,
        max_limit=config.max_limit,
    )

    try:
        result = engine.rank(
            args.user_id,
            limit=args.limit if args.limit is not None else config.default_limit,
            offset=args.offset,
            exclude_overdue=config.exclude_overdue and not args.include_overdue,
            min_score=args.min_score if args.min_score is not None else config.min_score,
        )
    except InvalidRequestError as e:
        logger.error("Invalid request: %s", e)
        return 2
    except PreferencesNotFoundError as e:
        logger.error("%s", e)
        return 3
    except Exception as e:
        logger.error("Ranking failed: %s", e, exc_info=True)
        return 1

    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
