"""Aggregation filter, deterministic ordering and pagination."""

import logging
from typing import Iterable, List, Tuple

from ..models import ScoredGrant

logger = logging.getLogger(__name__)

DEFAULT_MIN_SCORE = 0.3


def is_qualifying(scored: ScoredGrant, min_score: float = DEFAULT_MIN_SCORE) -> bool:
    """A grant qualifies if it meets the minimum score and is not overdue.

    The deadline veto is independent of the candidate supplier's overdue
    filter.
    """

    if scored.recommendation_score < min_score:
        return False
    if scored.score_breakdown.deadline_score == 0:
        logger.debug("Filtering out grant %s - deadline passed", scored.grant_id)
        return False
    return True


def sort_key(scored: ScoredGrant) -> tuple:
    """Descending score, ties broken by ascending grant id."""
    return (-scored.recommendation_score, scored.grant_id)


def rank_scored_grants(
    scored_grants: Iterable[ScoredGrant],
    min_score: float = DEFAULT_MIN_SCORE,
    limit: int = 20,
    offset: int = 0,
) -> Tuple[List[ScoredGrant], int]:
    """Filter, sort and paginate scored grants.

    Pagination is applied after filtering, so ``total`` counts every
    qualifying grant and successive pages are disjoint.

    Args:
        scored_grants: All scored candidates
        min_score: Minimum recommendation score
        limit: Page size
        offset: Number of qualifying grants to skip

    Returns:
        Tuple of (page, total qualifying count)
    """

    qualifying = sorted(
        (s for s in scored_grants if is_qualifying(s, min_score)),
        key=sort_key,
    )
    return qualifying[offset:offset + limit], len(qualifying)
