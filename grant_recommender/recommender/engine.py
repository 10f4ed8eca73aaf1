"""Recommendation engine: the public ranking entry point.

Flow per request:
1. Validate the request (before any I/O)
2. Load preferences and interaction history concurrently
3. Fetch candidates, excluding every grant the user interacted with
4. Compute the preference mask and dynamic weights once
5. One batch similarity lookup (degrades on failure)
6. Score, filter, sort, paginate
7. Generate match reasons for the returned page only

The engine holds no per-request state; one instance can serve concurrent
requests.
"""

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Optional

from ..adapters.base import CandidateSource, PreferenceSource, SimilaritySource, safe_similarity
from ..exceptions import InvalidRequestError, PreferencesNotFoundError, RecommendationError
from ..explanations import generate_match_reasons
from ..models import RecommendationResult
from ..ranking import DEFAULT_MIN_SCORE, rank_scored_grants
from ..scorer.engine import score_grants, to_utc_date
from ..scorer.weights import (
    DEFAULT_WEIGHTS,
    PreferenceMask,
    ScoringWeights,
    calculate_dynamic_weights,
    check_base_weights,
)

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
DEFAULT_MAX_LIMIT = 100
USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_\-.:@]{0,127}$")


class RecommendationEngine:
    """Ranks candidate grants for a user by weighted multi-criteria scoring."""

    def __init__(
        self,
        preference_source: PreferenceSource,
        candidate_source: CandidateSource,
        similarity_source: Optional[SimilaritySource] = None,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        clock: Optional[Callable[[], datetime]] = None,
        max_limit: int = DEFAULT_MAX_LIMIT,
    ) -> None:
        """Initialize the engine with its collaborators.

        Args:
            preference_source: Loads preferences and interaction history
            candidate_source: Supplies hard-filtered candidate grants
            similarity_source: Embedding similarity provider (None = always degraded)
            weights: Base scoring weights
            clock: Returns the current time (defaults to UTC now)
            max_limit: Largest page size accepted

        Raises:
            ValueError: If the always-active criteria carry no base weight
        """
        self.preference_source = preference_source
        self.candidate_source = candidate_source
        self.similarity_source = similarity_source
        self.weights = check_base_weights(weights)
        self.max_limit = max_limit
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def rank(
        self,
        user_id: str,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
        exclude_overdue: bool = True,
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> RecommendationResult:
        """Rank grants for a user.

        Args:
            user_id: User to rank for
            limit: Page size
            offset: Qualifying grants to skip
            exclude_overdue: Ask the candidate supplier to drop past deadlines
            min_score: Minimum recommendation score to surface

        Returns:
            RecommendationResult sorted by descending score; ``total`` counts
            all qualifying grants before pagination.

        Raises:
            InvalidRequestError: Malformed input
            PreferencesNotFoundError: The user has no preference record
        """
        self._validate_request(user_id, limit, offset, min_score)

        logger.info(
            "rank_start user_id=%s limit=%d offset=%d exclude_overdue=%s min_score=%.2f",
            user_id, limit, offset, exclude_overdue, min_score,
        )
        start = time.monotonic()

        try:
            result = self._rank(user_id, limit, offset, exclude_overdue, min_score)
        except RecommendationError:
            raise
        except Exception as exc:
            logger.error(
                "rank_failed user_id=%s error=%s", user_id, exc, exc_info=True
            )
            raise

        duration_ms = (time.monotonic() - start) * 1000
        logger.info(
            "rank_complete user_id=%s total=%d returned=%d duration_ms=%.0f",
            user_id, result.total, len(result.grants), duration_ms,
        )
        return result

    def _rank(
        self,
        user_id: str,
        limit: int,
        offset: int,
        exclude_overdue: bool,
        min_score: float,
    ) -> RecommendationResult:
        today = to_utc_date(self._clock())

        with ThreadPoolExecutor(max_workers=2) as pool:
            preferences_future = pool.submit(self.preference_source.load_preferences, user_id)
            history_future = pool.submit(self.preference_source.load_interaction_history, user_id)
            preferences = preferences_future.result()
            interaction_history = history_future.result() or []

        if preferences is None:
            logger.warning("Preferences not found for user %s", user_id)
            raise PreferencesNotFoundError(user_id)

        interacted_ids = sorted({i.grant_id for i in interaction_history})
        candidates = self.candidate_source.fetch_candidates(
            preferences,
            exclude_overdue=exclude_overdue,
            exclude_ids=interacted_ids,
        )
        excluded = set(interacted_ids)
        candidates = [g for g in candidates or [] if g.id not in excluded]

        if not candidates:
            logger.info("No candidate grants for user %s", user_id)
            return RecommendationResult(grants=[], total=0, limit=limit, offset=offset)

        mask = PreferenceMask.from_preferences(preferences)
        weights = calculate_dynamic_weights(mask, self.weights)

        similarities = {}
        if mask.embedding and preferences.project_description_embedding:
            similarities = safe_similarity(
                self.similarity_source,
                preferences.project_description_embedding,
                [g.id for g in candidates],
            )

        scored = score_grants(
            candidates,
            preferences,
            mask,
            weights,
            similarities,
            interaction_history,
            today,
        )

        page, total = rank_scored_grants(scored, min_score=min_score, limit=limit, offset=offset)

        explained = [
            s.model_copy(
                update={
                    "match_reasons": generate_match_reasons(
                        s.grant, s.score_breakdown, s.recommendation_score, mask, today
                    )
                }
            )
            for s in page
        ]

        return RecommendationResult(grants=explained, total=total, limit=limit, offset=offset)

    def _validate_request(self, user_id, limit, offset, min_score) -> None:
        """Reject malformed requests before any scoring work begins."""
        if not isinstance(user_id, str) or not USER_ID_PATTERN.match(user_id):
            raise InvalidRequestError(f"Invalid user id: {user_id!r}")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise InvalidRequestError(f"limit must be a non-negative integer, got {limit!r}")
        if limit > self.max_limit:
            raise InvalidRequestError(f"limit must be at most {self.max_limit}, got {limit}")
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise InvalidRequestError(f"offset must be a non-negative integer, got {offset!r}")
        if isinstance(min_score, bool) or not isinstance(min_score, (int, float)) or not 0 <= min_score <= 1:
            raise InvalidRequestError(f"min_score must be between 0 and 1, got {min_score!r}")
