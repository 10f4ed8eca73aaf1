"""In-memory implementation of every engine boundary.

Used by tests and local runs; mirrors the query semantics of the Supabase
backend.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from ..eligibility import filter_candidates
from ..exceptions import SimilarityUnavailableError
from ..models import Grant, Interaction, UserPreferences
from ..scorer.engine import to_utc_date
from .base import CandidateSource, PreferenceSource, SimilaritySource

logger = logging.getLogger(__name__)


class InMemoryStore(PreferenceSource, CandidateSource, SimilaritySource):
    """Grants, preferences, interactions and grant embeddings held in dicts."""

    def __init__(
        self,
        grants: Iterable[Grant] = (),
        preferences: Iterable[UserPreferences] = (),
        interactions: Iterable[Interaction] = (),
        grant_embeddings: Optional[Mapping[str, Sequence[float]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._grants: Dict[str, Grant] = {g.id: g for g in grants}
        self._preferences: Dict[str, UserPreferences] = {p.user_id: p for p in preferences}
        self._interactions: Dict[tuple, Interaction] = {}
        self._embeddings: Dict[str, List[float]] = {
            k: list(v) for k, v in (grant_embeddings or {}).items()
        }
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        for interaction in interactions:
            self.record_interaction(interaction)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_grant(self, grant: Grant, embedding: Optional[Sequence[float]] = None) -> None:
        self._grants[grant.id] = grant
        if embedding is not None:
            self._embeddings[grant.id] = list(embedding)

    def set_preferences(self, preferences: UserPreferences) -> None:
        self._preferences[preferences.user_id] = preferences

    def record_interaction(self, interaction: Interaction) -> None:
        """Store an interaction, overwriting any earlier one for the same grant."""
        self._interactions[(interaction.user_id, interaction.grant_id)] = interaction

    # ------------------------------------------------------------------
    # PreferenceSource
    # ------------------------------------------------------------------

    def load_preferences(self, user_id: str) -> Optional[UserPreferences]:
        return self._preferences.get(user_id)

    def load_interaction_history(self, user_id: str) -> List[Interaction]:
        history = [i for (uid, _), i in self._interactions.items() if uid == user_id]
        return sorted(history, key=lambda i: i.created_at, reverse=True)

    # ------------------------------------------------------------------
    # CandidateSource
    # ------------------------------------------------------------------

    def fetch_candidates(
        self,
        preferences: UserPreferences,
        exclude_overdue: bool = True,
        exclude_ids: Sequence[str] = (),
    ) -> List[Grant]:
        return filter_candidates(
            self._grants.values(),
            preferences,
            today=to_utc_date(self._clock()),
            exclude_overdue=exclude_overdue,
            exclude_ids=frozenset(exclude_ids),
        )

    # ------------------------------------------------------------------
    # SimilaritySource
    # ------------------------------------------------------------------

    def similarity(self, embedding: Sequence[float], grant_ids: Sequence[str]) -> Dict[str, float]:
        if not embedding:
            raise SimilarityUnavailableError("Empty query embedding")

        results = {}
        for grant_id in grant_ids:
            grant_embedding = self._embeddings.get(grant_id)
            if grant_embedding is not None:
                results[grant_id] = cosine_similarity(embedding, grant_embedding)
        return results


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors; 0.0 for zero vectors."""
    if len(a) != len(b):
        raise SimilarityUnavailableError(
            f"Embedding dimension mismatch: {len(a)} != {len(b)}"
        )
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    if norm == 0:
        return 0.0
    return dot / norm
