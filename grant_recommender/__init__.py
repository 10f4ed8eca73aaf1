"""Grant recommendation engine: weighted multi-criteria ranking of grants."""

from .exceptions import (
    InvalidRequestError,
    PreferencesNotFoundError,
    RecommendationError,
    SimilarityUnavailableError,
)
from .recommender import RecommendationEngine

__all__ = [
    "RecommendationEngine",
    "RecommendationError",
    "InvalidRequestError",
    "PreferencesNotFoundError",
    "SimilarityUnavailableError",
]
