"""Boundary interfaces for the collaborators the engine consumes."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from ..models import Grant, Interaction, UserPreferences

logger = logging.getLogger(__name__)


class PreferenceSource(ABC):
    """Supplies a user's preference record and interaction history."""

    @abstractmethod
    def load_preferences(self, user_id: str) -> Optional[UserPreferences]:
        """Return the user's preferences, or None if no record exists."""
        pass

    @abstractmethod
    def load_interaction_history(self, user_id: str) -> List[Interaction]:
        """Return every interaction of the user, newest first."""
        pass


class CandidateSource(ABC):
    """Supplies grants that already pass the mandatory filters."""

    @abstractmethod
    def fetch_candidates(
        self,
        preferences: UserPreferences,
        exclude_overdue: bool = True,
        exclude_ids: Sequence[str] = (),
    ) -> List[Grant]:
        """Fetch candidate grants for a user.

        Args:
            preferences: The user's loaded preferences; their hard gates apply
            exclude_overdue: Drop grants whose deadline has passed
            exclude_ids: Grant ids to leave out (prior interactions)

        Returns:
            Grants passing cost-sharing, clinical-trial, data-source and
            deadline gates.
        """
        pass


class SimilaritySource(ABC):
    """Cosine similarity between a query embedding and grant embeddings."""

    @abstractmethod
    def similarity(self, embedding: Sequence[float], grant_ids: Sequence[str]) -> Dict[str, float]:
        """Return grant id -> cosine similarity in [-1, 1].

        May raise; callers go through :func:`safe_similarity`.
        """
        pass

    @property
    def source_name(self) -> str:
        return type(self).__name__


def safe_similarity(
    provider: Optional[SimilaritySource],
    embedding: Sequence[float],
    grant_ids: Sequence[str],
) -> Dict[str, float]:
    """Similarity lookup with full error handling; returns {} on any failure.

    An empty map puts the embedding criterion in degraded mode; the call is
    never retried.
    """
    if provider is None or not grant_ids:
        return {}

    start = time.monotonic()
    try:
        results = provider.similarity(embedding, grant_ids)
        duration_ms = (time.monotonic() - start) * 1000
        logger.info(
            "similarity_complete source=%s result=success count=%d duration_ms=%.0f",
            provider.source_name,
            len(results or {}),
            duration_ms,
        )
        return dict(results or {})
    except Exception as exc:
        duration_ms = (time.monotonic() - start) * 1000
        logger.warning(
            "similarity_complete source=%s result=failure error=%s duration_ms=%.0f",
            provider.source_name,
            exc,
            duration_ms,
        )
        return {}
