"""Mandatory eligibility gates applied before scoring."""

from .filter import assess_eligibility, filter_candidates

__all__ = ["assess_eligibility", "filter_candidates"]
