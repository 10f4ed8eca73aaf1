"""Shared Pydantic models for the grant recommendation engine."""

from .grant import Grant
from .preferences import (
    ClinicalTrialPreference,
    CostSharingPreference,
    Interaction,
    InteractionAction,
    UserPreferences,
)
from .scored_grant import RecommendationResult, ScoreBreakdown, ScoredGrant
from .eligibility_result import ConstraintCheck, EligibilityResult

__all__ = [
    "Grant",
    "UserPreferences",
    "Interaction",
    "InteractionAction",
    "CostSharingPreference",
    "ClinicalTrialPreference",
    "ScoreBreakdown",
    "ScoredGrant",
    "RecommendationResult",
    "ConstraintCheck",
    "EligibilityResult",
]
