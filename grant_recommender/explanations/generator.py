"""Human-readable match reasons derived from a grant's sub-scores.

Reasons are ordered by criterion importance. Generation is a pure function
and only runs for grants that are actually returned to the caller.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from ..models import Grant, ScoreBreakdown
from ..scorer.engine import to_utc_date
from ..scorer.weights import PreferenceMask

ELIGIBILITY_REMINDER = "📝 Check eligibility requirements"

EMBEDDING_REASONS = [
    (0.9, "🎯 Exceptionally relevant to your research and organization profile"),
    (0.8, "🎯 Highly relevant to your project interests"),
    (0.7, "🎯 Well-aligned with your research focus"),
    (0.6, "🎯 Good match for your project description"),
]

FUNDING_REASONS = [
    (0.95, "💰 Funding perfectly matches your target range"),
    (0.8, "💰 Funding amount within your preferred range"),
    (0.6, "💰 Funding amount reasonably close to your range"),
]

CATEGORY_REASONS = [
    (0.8, "📋 Strong match with your research categories"),
    (0.6, "📋 Good category alignment"),
]

SUMMARY_TIERS = [
    (0.7, "Recommended based on multiple matching factors"),
    (0.5, "Moderate match with your profile"),
]
SUMMARY_FALLBACK = "Potential opportunity to explore"


def generate_match_reasons(
    grant: Grant,
    breakdown: ScoreBreakdown,
    recommendation_score: float,
    mask: PreferenceMask,
    today: date,
) -> list[str]:
    """Build the ordered list of match reasons for one grant.

    Args:
        grant: The scored grant
        breakdown: Its sub-scores
        recommendation_score: Its aggregate score (used for the summary tier)
        mask: Preference presence mask for the request
        today: Reference date for the days-remaining wording

    Returns:
        Ordered list of short reason strings (never empty)
    """

    reasons: list[str] = []

    # Strict thresholds for relevance
    reason = _first_above(breakdown.embedding_score, EMBEDDING_REASONS, strict=True)
    if reason:
        reasons.append(reason)

    deadline = breakdown.deadline_score
    if deadline >= 0.9:
        days_left = _days_left(grant, today)
        reasons.append(f"⏰ Perfect timing: {days_left} days to prepare application")
    elif deadline >= 0.7:
        reasons.append("⏰ Good deadline window for quality preparation")
    elif deadline >= 0.3:
        reasons.append("⏰ Tight deadline - quick action needed")

    # Unset preferences score 1.0 by default; that is not a match
    if mask.funding:
        reason = _first_above(breakdown.funding_score, FUNDING_REASONS)
        if reason:
            reasons.append(reason)

    reason = _first_above(breakdown.category_score, CATEGORY_REASONS)
    if reason:
        reasons.append(reason)

    if mask.agency and breakdown.agency_score == 1.0:
        reasons.append(f"🏛️ From preferred agency: {grant.funding_organization_name}")

    if breakdown.freshness_score == 1.0:
        reasons.append("🆕 Recently posted opportunity")

    if not reasons:
        reasons.append(
            _first_above(recommendation_score, SUMMARY_TIERS) or SUMMARY_FALLBACK
        )

    if grant.eligibility_criteria:
        reasons.append(ELIGIBILITY_REMINDER)

    return reasons


def _first_above(
    score: float,
    tiers: list[tuple[float, str]],
    strict: bool = False,
) -> Optional[str]:
    for threshold, text in tiers:
        if score > threshold or (not strict and score == threshold):
            return text
    return None


def _days_left(grant: Grant, today: date) -> int:
    if grant.application_deadline is None:
        return 0
    return (to_utc_date(grant.application_deadline) - today).days
