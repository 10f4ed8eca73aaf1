"""Multi-factor scoring engine for candidate grants.

Implements eight independent sub-scores combined with dynamic weights.
Every sub-score is a pure function with a defined value for any
(grant, preferences) combination, including all-null records.
"""

import logging
import math
from datetime import date, datetime, timezone
from typing import Iterable, List, Mapping, Optional, Sequence

from ..models import Grant, Interaction, ScoreBreakdown, ScoredGrant, UserPreferences
from .weights import PreferenceMask, ScoringWeights

logger = logging.getLogger(__name__)

# Embedding
DEGRADED_EMBEDDING_SCORE = 0.4
EMBEDDING_BOOST_THRESHOLD = 0.8
EMBEDDING_BOOST = 1.1

# Funding
UNKNOWN_FUNDING_SCORE = 0.4
BELOW_RANGE_FACTOR = 0.7
ABOVE_RANGE_FACTOR = 0.5

# Deadline
NO_DEADLINE_SCORE = 0.2

NEUTRAL_SCORE = 0.5
DEBUG_SAMPLE_SIZE = 3


def score_grants(
    grants: Sequence[Grant],
    preferences: UserPreferences,
    mask: PreferenceMask,
    weights: ScoringWeights,
    similarities: Mapping[str, float],
    interaction_history: Sequence[Interaction],
    today: date,
) -> List[ScoredGrant]:
    """Score every candidate grant.

    Args:
        grants: Candidate grants (already past the mandatory filters)
        preferences: The user's preferences
        mask: Preference presence mask for this request
        weights: Dynamic weights for this request
        similarities: grant id -> cosine similarity (may be empty)
        interaction_history: The user's prior interactions
        today: Reference date for deadline and freshness

    Returns:
        ScoredGrant list in input order, without match reasons
    """

    positive_history = [i for i in interaction_history if i.is_positive]
    has_history = len(interaction_history) > 0

    scored = []
    for grant in grants:
        result = score_grant(
            grant,
            preferences,
            mask,
            weights,
            similarities.get(grant.id),
            positive_history if has_history else None,
            today,
        )
        if len(scored) < DEBUG_SAMPLE_SIZE:
            logger.debug(
                "grant_scored grant_id=%s title=%r breakdown=%s score=%.4f",
                grant.id,
                grant.title[:50],
                result.score_breakdown.model_dump(),
                result.recommendation_score,
            )
        scored.append(result)
    return scored


def score_grant(
    grant: Grant,
    preferences: UserPreferences,
    mask: PreferenceMask,
    weights: ScoringWeights,
    similarity: Optional[float],
    positive_history: Optional[Sequence[Interaction]],
    today: date,
) -> ScoredGrant:
    """Compute the eight sub-scores and the weighted recommendation score.

    ``positive_history`` is None when the user has no interactions at all,
    and the saved/applied subset otherwise.
    """

    breakdown = ScoreBreakdown(
        embedding_score=score_embedding(similarity),
        funding_score=score_funding(grant, preferences, mask),
        deadline_score=score_deadline(grant, today),
        agency_score=score_agency(grant, preferences),
        category_score=score_category(grant, preferences),
        project_period_score=score_project_period(grant, preferences),
        freshness_score=score_freshness(grant, today),
        interaction_score=score_interaction(grant, positive_history),
    )

    total = (
        breakdown.embedding_score * weights.embedding +
        breakdown.funding_score * weights.funding +
        breakdown.deadline_score * weights.deadline +
        breakdown.agency_score * weights.agency +
        breakdown.category_score * weights.category +
        breakdown.project_period_score * weights.project_period +
        breakdown.freshness_score * weights.freshness +
        breakdown.interaction_score * weights.interaction
    )

    return ScoredGrant(
        grant=grant,
        score_breakdown=breakdown,
        recommendation_score=_clamp(total),
    )


def score_embedding(similarity: Optional[float]) -> float:
    """Score semantic relevance from a cosine similarity.

    No similarity (provider failure or no description) yields the
    degraded-mode default, deliberately below neutral.
    """

    if similarity is None or math.isnan(similarity):
        return DEGRADED_EMBEDDING_SCORE

    score = _clamp(similarity)
    if score > EMBEDDING_BOOST_THRESHOLD:
        return min(1.0, score * EMBEDDING_BOOST)
    return score


def score_funding(grant: Grant, preferences: UserPreferences, mask: PreferenceMask) -> float:
    """Score compatibility of the grant's funding range with the preferred one.

    Scoring:
    - No funding preference = 1.0
    - Grant has no funding information = 0.4
    - Ranges intersect (either contains the other, or partial overlap) = 1.0
    - Grant entirely below = 0.7 x grantMax / prefMin
    - Grant entirely above = 0.5 x prefMax / grantMin

    Overlap scores like containment, which keeps the score monotonic as the
    preferred window widens.
    """

    if not mask.funding:
        return 1.0

    if grant.funding_amount_min is None and grant.funding_amount_max is None:
        return UNKNOWN_FUNDING_SCORE

    pref_min, pref_max = _bounds(preferences.funding_min, preferences.funding_max)
    grant_min, grant_max = _bounds(grant.funding_amount_min, grant.funding_amount_max)

    if grant_max < pref_min:
        return _clamp(BELOW_RANGE_FACTOR * grant_max / pref_min)

    if grant_min > pref_max:
        return _clamp(ABOVE_RANGE_FACTOR * pref_max / grant_min)

    return 1.0


def score_deadline(grant: Grant, today: date) -> float:
    """Score preparation time until the application deadline.

    A deadline in the past scores 0, which the ranker treats as a veto.
    """

    if grant.application_deadline is None:
        return NO_DEADLINE_SCORE

    days_until = (to_utc_date(grant.application_deadline) - today).days
    return deadline_curve(days_until)


def deadline_curve(days_until: int) -> float:
    """Piecewise, continuous, unimodal curve over days until the deadline.

    < 14 days: too rushed (0 -> 0.3)
    14-30 days: challenging but doable (0.3 -> 0.7)
    30-90 days: optimal, peaking at 1.0 on day 60 and easing to 0.9
    90-180 days: good but not urgent (0.9 -> 0.6)
    > 180 days: too far out, floored at 0.3
    """

    if days_until < 0:
        return 0.0
    if days_until < 14:
        return days_until / 14 * 0.3
    if days_until < 30:
        return 0.3 + (days_until - 14) / 16 * 0.4
    if days_until <= 60:
        return 0.7 + (days_until - 30) / 30 * 0.3
    if days_until <= 90:
        return 1.0 - (days_until - 60) / 30 * 0.1
    if days_until <= 180:
        return 0.9 - (days_until - 90) / 90 * 0.3
    months_out = days_until / 30
    return max(0.3, 0.6 - (months_out - 6) * 0.05)


def score_agency(grant: Grant, preferences: UserPreferences) -> float:
    """Binary agency match; 1.0 when the user has no agency preference."""

    if not preferences.agencies:
        return 1.0
    if grant.funding_organization_name in preferences.agencies:
        return 1.0
    return 0.0


def score_category(grant: Grant, preferences: UserPreferences) -> float:
    """Average of grant-type, activity-code and keyword checks.

    A check only counts when the user listed values for it (and, for type and
    codes, the grant carries the field). With no applicable check the score
    is a neutral 0.5.
    """

    score = 0.0
    total_checks = 0

    if preferences.grant_types and grant.grant_type:
        total_checks += 1
        if grant.grant_type in preferences.grant_types:
            score += 1.0

    if preferences.activity_codes and grant.cfda_numbers:
        total_checks += 1
        if set(grant.cfda_numbers) & set(preferences.activity_codes):
            score += 1.0

    if preferences.keywords:
        total_checks += 1
        text = grant.searchable_text.lower()
        matching = [kw for kw in preferences.keywords if kw.lower() in text]
        score += len(matching) / len(preferences.keywords)

    if total_checks == 0:
        return NEUTRAL_SCORE
    return score / total_checks


def score_project_period(grant: Grant, preferences: UserPreferences) -> float:
    """Always 1.0: ingested grants carry no project-period field."""
    return 1.0


def score_freshness(grant: Grant, today: date) -> float:
    """Bonus for recently posted grants."""

    if grant.posted_date is None:
        return 0.0

    days_since_posted = (today - to_utc_date(grant.posted_date)).days

    if days_since_posted <= 7:
        return 1.0
    if days_since_posted <= 30:
        return 1 - (days_since_posted - 7) / 23
    if days_since_posted <= 90:
        return 0.3
    return 0.0


def score_interaction(grant: Grant, positive_history: Optional[Iterable[Interaction]]) -> float:
    """Collaborative-filtering signal from saved/applied grants.

    Each positive interaction contributes 0.5 for a matching agency and 0.5
    for a matching grant type; the result is averaged and capped at 1.0.
    """

    if positive_history is None:
        return NEUTRAL_SCORE

    positives = list(positive_history)
    if not positives:
        return NEUTRAL_SCORE

    similarity = 0.0
    for interaction in positives:
        if interaction.grant_agency_name and interaction.grant_agency_name == grant.funding_organization_name:
            similarity += 0.5
        if interaction.grant_type and interaction.grant_type == grant.grant_type:
            similarity += 0.5

    return min(1.0, similarity / len(positives))


def _bounds(low: Optional[float], high: Optional[float]) -> tuple:
    """Resolve a nullable range: absent low = 0, absent high = +inf."""
    low = 0.0 if low is None else float(low)
    high = math.inf if high is None else float(high)
    if low > high:
        low, high = high, low
    return low, high


def to_utc_date(value: datetime) -> date:
    """Calendar date of a timestamp; naive values are taken as UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).date()
    return value.date()


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))
