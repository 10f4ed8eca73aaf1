"""Supabase-backed implementation of the engine's external boundaries."""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from supabase import Client, create_client

from ..adapters.base import CandidateSource, PreferenceSource, SimilaritySource
from ..eligibility import filter_candidates
from ..exceptions import SimilarityUnavailableError
from ..models import CostSharingPreference, Grant, Interaction, UserPreferences
from ..scorer.engine import to_utc_date

logger = logging.getLogger(__name__)

SIMILARITY_RPC = "calculate_grant_similarities"
SIMILARITY_FALLBACK_RPC = "calculate_grant_similarities_fallback"
INTERACTION_COLUMNS = "*, grants(funding_organization_name, grant_type)"


class SupabaseClient(PreferenceSource, CandidateSource, SimilaritySource):
    """Reads user_preferences, user_interactions and grants; calls similarity RPCs."""

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize Supabase client from explicit args or env vars.

        Args:
            url: Supabase project URL (falls back to SUPABASE_URL env var).
            key: Supabase anon/service key (falls back to SUPABASE_KEY env var).
            clock: Returns the current time; used for the overdue filter.
        """
        self._url = url or os.environ["SUPABASE_URL"]
        self._key = key or os.environ["SUPABASE_KEY"]
        self._client: Client = create_client(self._url, self._key)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # ------------------------------------------------------------------
    # PreferenceSource
    # ------------------------------------------------------------------

    def load_preferences(self, user_id: str) -> Optional[UserPreferences]:
        """Fetch the user's preference record.

        Returns:
            UserPreferences, or None if the user has none.
        """
        response = (
            self._client.table("user_preferences")
            .select("*")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            logger.info("No preferences stored for user %s", user_id)
            return None
        return UserPreferences(**response.data[0])

    def load_interaction_history(self, user_id: str) -> List[Interaction]:
        """Fetch all interactions for a user, newest first.

        The interacted grant's agency and type are embedded through the
        grants foreign key for collaborative scoring.
        """
        response = (
            self._client.table("user_interactions")
            .select(INTERACTION_COLUMNS)
            .eq("user_id", user_id)
            .order("timestamp", desc=True)
            .execute()
        )
        return [_to_interaction(row) for row in response.data or []]

    # ------------------------------------------------------------------
    # CandidateSource
    # ------------------------------------------------------------------

    def fetch_candidates(
        self,
        preferences: UserPreferences,
        exclude_overdue: bool = True,
        exclude_ids: Sequence[str] = (),
    ) -> List[Grant]:
        """Fetch grants passing the user's mandatory filters.

        Deadline, exclusion, cost-sharing and data-source gates are pushed
        into the query; every row is then re-checked by the shared
        eligibility filter, which also applies the nullable clinical-trial
        gate.

        The preferences are the ones the engine already loaded for this
        request, so gating and scoring see the same record.
        """
        today = to_utc_date(self._clock())

        query = self._client.table("grants").select("*")

        if exclude_overdue:
            query = query.or_(
                f"application_deadline.gte.{today.isoformat()},application_deadline.is.null"
            )

        if exclude_ids:
            query = query.not_.in_("id", list(exclude_ids))
            logger.info("Excluding %d already interacted grants", len(exclude_ids))

        if preferences.cost_sharing_preference != CostSharingPreference.ANY:
            query = query.eq(
                "cost_sharing",
                preferences.cost_sharing_preference == CostSharingPreference.REQUIRED,
            )

        if preferences.data_sources:
            query = query.in_("data_source", preferences.data_sources)

        response = query.execute()
        grants = [_to_grant(row) for row in response.data or []]

        return filter_candidates(
            grants,
            preferences,
            today=today,
            exclude_overdue=exclude_overdue,
            exclude_ids=frozenset(exclude_ids),
        )

    # ------------------------------------------------------------------
    # SimilaritySource
    # ------------------------------------------------------------------

    def similarity(self, embedding: Sequence[float], grant_ids: Sequence[str]) -> Dict[str, float]:
        """Cosine similarity via the vector RPC, falling back to the JSON RPC.

        Raises:
            SimilarityUnavailableError: If both RPCs fail.
        """
        try:
            response = self._client.rpc(
                SIMILARITY_RPC,
                {"grant_ids": list(grant_ids), "query_embedding": list(embedding)},
            ).execute()
        except Exception as exc:
            logger.warning("Vector similarity function failed, trying fallback: %s", exc)
            try:
                response = self._client.rpc(
                    SIMILARITY_FALLBACK_RPC,
                    {"grant_ids": list(grant_ids), "query_embedding": json.dumps(list(embedding))},
                ).execute()
            except Exception as fallback_exc:
                raise SimilarityUnavailableError(
                    f"Both similarity functions failed: {fallback_exc}"
                ) from fallback_exc

        return {
            row["grant_id"]: float(row["similarity"])
            for row in response.data or []
            if row.get("similarity") is not None
        }


def _to_grant(row: Dict[str, Any]) -> Grant:
    """Build a Grant from a grants row, tolerating nullable flags."""
    data = dict(row)
    data["cost_sharing"] = bool(data.get("cost_sharing") or data.get("cost_sharing_required"))
    return Grant(**data)


def _to_interaction(row: Dict[str, Any]) -> Interaction:
    data = dict(row)
    grant = data.pop("grants", None) or {}
    if data.get("grant_agency_name") is None:
        data["grant_agency_name"] = grant.get("funding_organization_name")
    if data.get("grant_type") is None:
        data["grant_type"] = grant.get("grant_type")
    if data.get("created_at") is None and data.get("timestamp") is not None:
        data["created_at"] = data["timestamp"]
    if data.get("created_at") is None:
        data.pop("created_at", None)
    return Interaction(**data)
