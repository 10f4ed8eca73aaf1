"""Match-reason generation for surfaced grants."""

from .generator import generate_match_reasons

__all__ = ["generate_match_reasons"]
