"""Hard eligibility gates for candidate grants.

These constraints are binary: a grant either passes all of them and becomes
a candidate, or it is never scored. They contribute nothing to the score.
"""

import logging
from datetime import date
from typing import AbstractSet, Iterable, List

from ..models import (
    ClinicalTrialPreference,
    ConstraintCheck,
    CostSharingPreference,
    EligibilityResult,
    Grant,
    UserPreferences,
)
from ..scorer.engine import to_utc_date

logger = logging.getLogger(__name__)


def assess_eligibility(
    grant: Grant,
    preferences: UserPreferences,
    today: date,
    exclude_overdue: bool = True,
    exclude_ids: AbstractSet[str] = frozenset(),
) -> EligibilityResult:
    """Run every mandatory constraint check for one grant.

    Performs five constraint checks:
    1. Deadline not passed (only when exclude_overdue)
    2. Cost-sharing requirement
    3. Clinical-trial allowance
    4. Data-source allow-list
    5. Not previously interacted with

    Args:
        grant: Grant to assess
        preferences: The user's preferences
        today: Reference date for the overdue check
        exclude_overdue: Whether past deadlines disqualify the grant
        exclude_ids: Grant ids the user has already interacted with

    Returns:
        EligibilityResult with detailed check results
    """

    checks = [
        _check_deadline(grant, today, exclude_overdue),
        _check_cost_sharing(grant, preferences),
        _check_clinical_trial(grant, preferences),
        _check_data_source(grant, preferences),
        _check_prior_interaction(grant, exclude_ids),
    ]

    blockers = [f"{c.constraint_name}: {c.details}" for c in checks if not c.is_met]

    return EligibilityResult(
        grant_id=grant.id,
        is_eligible=not blockers,
        checks=checks,
        blockers=blockers,
    )


def filter_candidates(
    grants: Iterable[Grant],
    preferences: UserPreferences,
    today: date,
    exclude_overdue: bool = True,
    exclude_ids: AbstractSet[str] = frozenset(),
) -> List[Grant]:
    """Return the grants that pass every mandatory constraint."""

    eligible = []
    rejected = 0
    for grant in grants:
        result = assess_eligibility(grant, preferences, today, exclude_overdue, exclude_ids)
        if result.is_eligible:
            eligible.append(grant)
        else:
            rejected += 1
            logger.debug("Grant %s rejected: %s", grant.id, "; ".join(result.blockers))

    logger.info("Eligibility filter: %d eligible, %d rejected", len(eligible), rejected)
    return eligible


def _check_deadline(grant: Grant, today: date, exclude_overdue: bool) -> ConstraintCheck:
    if not exclude_overdue:
        return ConstraintCheck(constraint_name="Deadline", is_met=True, details="Overdue grants allowed")

    if grant.application_deadline is None:
        return ConstraintCheck(constraint_name="Deadline", is_met=True, details="No deadline")

    deadline = to_utc_date(grant.application_deadline)
    if deadline < today:
        return ConstraintCheck(
            constraint_name="Deadline",
            is_met=False,
            details=f"Deadline {deadline} has passed",
        )
    return ConstraintCheck(constraint_name="Deadline", is_met=True, details=f"Open until {deadline}")


def _check_cost_sharing(grant: Grant, preferences: UserPreferences) -> ConstraintCheck:
    pref = preferences.cost_sharing_preference
    if pref == CostSharingPreference.ANY:
        return ConstraintCheck(constraint_name="Cost Sharing", is_met=True, details="No preference")

    required = pref == CostSharingPreference.REQUIRED
    if grant.cost_sharing == required:
        return ConstraintCheck(constraint_name="Cost Sharing", is_met=True, details=f"Matches '{pref.value}'")
    return ConstraintCheck(
        constraint_name="Cost Sharing",
        is_met=False,
        details=f"Grant cost sharing={grant.cost_sharing}, user requires '{pref.value}'",
    )


def _check_clinical_trial(grant: Grant, preferences: UserPreferences) -> ConstraintCheck:
    pref = preferences.clinical_trial_preference
    if pref == ClinicalTrialPreference.ANY:
        return ConstraintCheck(constraint_name="Clinical Trial", is_met=True, details="No preference")

    # Unknown allowance does not constrain the grant
    if grant.clinical_trial_allowed is None:
        return ConstraintCheck(constraint_name="Clinical Trial", is_met=True, details="Unconstrained")

    allowed = pref == ClinicalTrialPreference.ALLOWED
    if grant.clinical_trial_allowed == allowed:
        return ConstraintCheck(constraint_name="Clinical Trial", is_met=True, details=f"Matches '{pref.value}'")
    return ConstraintCheck(
        constraint_name="Clinical Trial",
        is_met=False,
        details=f"Grant clinical trials allowed={grant.clinical_trial_allowed}, user requires '{pref.value}'",
    )


def _check_data_source(grant: Grant, preferences: UserPreferences) -> ConstraintCheck:
    if not preferences.data_sources:
        return ConstraintCheck(constraint_name="Data Source", is_met=True, details="No allow-list")

    if grant.data_source in preferences.data_sources:
        return ConstraintCheck(constraint_name="Data Source", is_met=True, details=f"{grant.data_source} allowed")
    return ConstraintCheck(
        constraint_name="Data Source",
        is_met=False,
        details=f"{grant.data_source} not in allow-list",
    )


def _check_prior_interaction(grant: Grant, exclude_ids: AbstractSet[str]) -> ConstraintCheck:
    if grant.id in exclude_ids:
        return ConstraintCheck(
            constraint_name="Prior Interaction",
            is_met=False,
            details="Already saved, applied or ignored",
        )
    return ConstraintCheck(constraint_name="Prior Interaction", is_met=True, details="Not seen")
