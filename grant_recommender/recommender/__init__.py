"""Public ranking entry point."""

from .engine import RecommendationEngine

__all__ = ["RecommendationEngine"]
