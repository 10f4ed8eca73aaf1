"""EligibilityResult - outcome of the mandatory candidate gates."""

from datetime import datetime, timezone
from pydantic import BaseModel, Field


class ConstraintCheck(BaseModel):
    """Result of a single hard constraint."""

    constraint_name: str
    is_met: bool
    details: str = ""


class EligibilityResult(BaseModel):
    """All hard-constraint checks for one (user, grant) pair."""

    grant_id: str
    is_eligible: bool
    checks: list[ConstraintCheck] = Field(default_factory=list)
    blockers: list[str] = Field(default_factory=list)
    evaluated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
