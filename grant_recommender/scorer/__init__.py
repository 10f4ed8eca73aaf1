"""Weighted multi-factor scoring engine for grant recommendations."""

from .engine import score_grant, score_grants, deadline_curve
from .weights import (
    DEFAULT_WEIGHTS,
    PreferenceMask,
    ScoringWeights,
    calculate_dynamic_weights,
)

__all__ = [
    "score_grant",
    "score_grants",
    "deadline_curve",
    "DEFAULT_WEIGHTS",
    "PreferenceMask",
    "ScoringWeights",
    "calculate_dynamic_weights",
]
