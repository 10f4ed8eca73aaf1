"""UserPreferences and Interaction - per-user inputs to the ranking engine."""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class CostSharingPreference(str, Enum):
    REQUIRED = "required"
    NOT_REQUIRED = "not_required"
    ANY = "any"


class ClinicalTrialPreference(str, Enum):
    ALLOWED = "allowed"
    NOT_ALLOWED = "not_allowed"
    ANY = "any"


class InteractionAction(str, Enum):
    SAVED = "saved"
    APPLIED = "applied"
    IGNORED = "ignored"


POSITIVE_ACTIONS = {InteractionAction.SAVED, InteractionAction.APPLIED}


class UserPreferences(BaseModel):
    """Stated matching preferences for one user.

    Whether an optional field is present is itself an input to dynamic
    weighting, so absent values stay None/empty and are never defaulted.
    """

    user_id: str = Field(..., description="Owning user")

    # Funding
    funding_min: Optional[float] = Field(None, ge=0, description="Lower funding bound")
    funding_max: Optional[float] = Field(None, ge=0, description="Upper funding bound")

    # Timing
    deadline_range: Optional[int] = Field(None, ge=0, description="Deadline horizon in days")
    project_period_min_years: Optional[float] = Field(None, ge=0)
    project_period_max_years: Optional[float] = Field(None, ge=0)

    # Agency and category
    agencies: list[str] = Field(default_factory=list, description="Preferred funding organizations")
    grant_types: list[str] = Field(default_factory=list)
    activity_codes: list[str] = Field(default_factory=list, description="Matched against CFDA numbers")
    keywords: list[str] = Field(default_factory=list)

    # Hard filters (applied by the candidate supplier, never scored)
    cost_sharing_preference: CostSharingPreference = CostSharingPreference.ANY
    clinical_trial_preference: ClinicalTrialPreference = ClinicalTrialPreference.ANY
    data_sources: list[str] = Field(default_factory=list, description="Allow-listed data sources")

    # Semantic matching
    project_description_query: Optional[str] = Field(None, description="Free-text project description")
    project_description_embedding: Optional[list[float]] = Field(
        None, description="Precomputed embedding of the project description"
    )

    @field_validator(
        "agencies", "grant_types", "activity_codes", "keywords", "data_sources", mode="before"
    )
    @classmethod
    def none_to_empty(cls, v):
        return v or []

    @field_validator("cost_sharing_preference", "clinical_trial_preference", mode="before")
    @classmethod
    def none_to_any(cls, v):
        return v or "any"

    @field_validator("project_description_embedding", mode="before")
    @classmethod
    def parse_vector(cls, v):
        """pgvector columns arrive over PostgREST as "[0.1,0.2,...]" strings."""
        if isinstance(v, str):
            return json.loads(v) if v.strip() else None
        return v


class Interaction(BaseModel):
    """A user's action on a grant; at most one per (user, grant)."""

    user_id: str
    grant_id: str
    action: InteractionAction
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Denormalized grant attributes used for collaborative filtering
    grant_agency_name: Optional[str] = None
    grant_type: Optional[str] = None

    @property
    def is_positive(self) -> bool:
        return self.action in POSITIVE_ACTIONS
