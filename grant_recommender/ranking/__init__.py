"""Ranking of scored grants."""

from .ranker import DEFAULT_MIN_SCORE, is_qualifying, rank_scored_grants, sort_key

__all__ = ["DEFAULT_MIN_SCORE", "is_qualifying", "rank_scored_grants", "sort_key"]
