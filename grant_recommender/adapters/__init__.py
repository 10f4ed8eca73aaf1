"""Boundary adapters: preference, candidate and similarity sources."""

from .base import CandidateSource, PreferenceSource, SimilaritySource, safe_similarity
from .memory import InMemoryStore, cosine_similarity

__all__ = [
    "CandidateSource",
    "PreferenceSource",
    "SimilaritySource",
    "safe_similarity",
    "InMemoryStore",
    "cosine_similarity",
]
