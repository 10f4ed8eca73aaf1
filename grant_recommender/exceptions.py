"""Error taxonomy for the recommendation engine."""


class RecommendationError(Exception):
    """Base class for all engine errors."""


class InvalidRequestError(RecommendationError, ValueError):
    """Malformed ranking request, rejected before any scoring work."""


class PreferencesNotFoundError(RecommendationError, LookupError):
    """The user has no preference record; ranking is undefined without one."""

    def __init__(self, user_id: str):
        super().__init__(f"User preferences not found for user_id={user_id}")
        self.user_id = user_id


class SimilarityUnavailableError(RecommendationError):
    """The similarity provider could not produce scores.

    Never surfaced to callers of ``rank``; the engine falls back to the
    degraded embedding score instead.
    """
