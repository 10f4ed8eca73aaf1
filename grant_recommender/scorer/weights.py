"""Scoring weight configuration and dynamic redistribution.

Base weights are fixed constants.
Per request, criteria the user never expressed a preference for are zeroed
and their mass is re-injected proportionally over the remaining criteria.
"""

import logging
from dataclasses import dataclass, asdict

from pydantic import BaseModel, field_validator

from ..models import UserPreferences

logger = logging.getLogger(__name__)

WEIGHT_FIELDS = (
    "embedding",
    "deadline",
    "funding",
    "category",
    "agency",
    "freshness",
    "project_period",
    "interaction",
)

# Criteria that need no explicit user input and are never zeroed
ALWAYS_ACTIVE = ("category", "freshness", "interaction")


class ScoringWeights(BaseModel):
    """Weights for the eight scoring criteria.

    All weights must sum to 1.0 for proper composite scoring.
    """

    embedding: float = 0.35
    deadline: float = 0.25
    funding: float = 0.20
    category: float = 0.10
    agency: float = 0.05
    freshness: float = 0.03
    project_period: float = 0.01
    interaction: float = 0.01
    version: str = "1.0"

    @field_validator(*WEIGHT_FIELDS)
    @classmethod
    def weight_range(cls, v: float) -> float:
        """Ensure weights are between 0 and 1."""
        if not 0 <= v <= 1:
            raise ValueError(f"Weight must be between 0 and 1, got {v}")
        return v

    def model_post_init(self, __context) -> None:
        """Validate that weights sum to 1.0."""
        total = self.total()
        if abs(total - 1.0) > 0.001:
            raise ValueError(
                f"Weights must sum to 1.0, got {total:.3f}. "
                + ", ".join(f"{name}:{getattr(self, name)}" for name in WEIGHT_FIELDS)
            )

    def total(self) -> float:
        return sum(getattr(self, name) for name in WEIGHT_FIELDS)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = {name: getattr(self, name) for name in WEIGHT_FIELDS}
        data["version"] = self.version
        return data


DEFAULT_WEIGHTS = ScoringWeights(
    embedding=0.35,
    deadline=0.25,
    funding=0.20,
    category=0.10,
    agency=0.05,
    freshness=0.03,
    project_period=0.01,
    interaction=0.01,
    version="1.0",
)


@dataclass(frozen=True)
class PreferenceMask:
    """Which optional preferences the user actually supplied.

    Computed once per request and passed to the weight calculator, the
    scorer and the explanation generator.
    """

    embedding: bool = False
    funding: bool = False
    deadline: bool = False
    agency: bool = False
    project_period: bool = False

    @classmethod
    def from_preferences(cls, preferences: UserPreferences) -> "PreferenceMask":
        query = preferences.project_description_query
        return cls(
            embedding=bool(query and query.strip()),
            funding=preferences.funding_min is not None or preferences.funding_max is not None,
            deadline=preferences.deadline_range is not None,
            agency=len(preferences.agencies) > 0,
            project_period=(
                preferences.project_period_min_years is not None
                or preferences.project_period_max_years is not None
            ),
        )

    def is_active(self, criterion: str) -> bool:
        if criterion in ALWAYS_ACTIVE:
            return True
        return getattr(self, criterion)


def calculate_dynamic_weights(
    mask: PreferenceMask,
    base: ScoringWeights = DEFAULT_WEIGHTS,
) -> ScoringWeights:
    """Redistribute the weight of unused criteria over the active ones.

    Unused criteria get exactly 0. Active criteria (including the always-on
    category, freshness and interaction) are scaled by 1 / (1 - U), where U
    is the base mass of the unused criteria, so the result sums to 1.0.

    Args:
        mask: Preference presence mask for the request
        base: Base weights to redistribute

    Returns:
        ScoringWeights with the redistributed values
    """

    unused_weight = sum(
        getattr(base, name) for name in WEIGHT_FIELDS if not mask.is_active(name)
    )
    active_weight = sum(
        getattr(base, name) for name in WEIGHT_FIELDS if mask.is_active(name)
    )

    values = {}
    for name in WEIGHT_FIELDS:
        if not mask.is_active(name):
            values[name] = 0.0
        elif unused_weight > 0 and active_weight > 0:
            values[name] = getattr(base, name) / active_weight
        else:
            values[name] = getattr(base, name)

    weights = ScoringWeights(**values, version=f"{base.version}+dynamic")

    logger.info(
        "dynamic_weights unused_weight=%.3f active=%s weights=%s",
        unused_weight,
        asdict(mask),
        {name: round(values[name], 4) for name in WEIGHT_FIELDS},
    )
    return weights


def check_base_weights(base: ScoringWeights) -> ScoringWeights:
    """Reject base weights that cannot be redistributed.

    A user with no optional preferences keeps only the always-active
    criteria, so their combined base weight must be positive.
    """
    always_active = sum(getattr(base, name) for name in ALWAYS_ACTIVE)
    if always_active <= 0:
        raise ValueError(
            "Base weights must give category, freshness or interaction a positive weight"
        )
    return base
