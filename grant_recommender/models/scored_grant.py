"""ScoredGrant - ephemeral per-request ranking output."""

from pydantic import BaseModel, Field

from .grant import Grant


class ScoreBreakdown(BaseModel):
    """The eight independent sub-scores, each in [0, 1]."""

    embedding_score: float = Field(..., ge=0, le=1)
    funding_score: float = Field(..., ge=0, le=1)
    deadline_score: float = Field(..., ge=0, le=1)
    agency_score: float = Field(..., ge=0, le=1)
    category_score: float = Field(..., ge=0, le=1)
    project_period_score: float = Field(..., ge=0, le=1)
    freshness_score: float = Field(..., ge=0, le=1)
    interaction_score: float = Field(..., ge=0, le=1)


class ScoredGrant(BaseModel):
    """A candidate grant with its sub-scores, aggregate score and reasons.

    Created per ranking request and discarded afterwards; never persisted.
    """

    grant: Grant
    score_breakdown: ScoreBreakdown
    recommendation_score: float = Field(..., ge=0, le=1)
    match_reasons: list[str] = Field(default_factory=list)

    @property
    def grant_id(self) -> str:
        return self.grant.id


class RecommendationResult(BaseModel):
    """One page of ranked grants.

    ``total`` counts every qualifying grant before pagination.
    """

    grants: list[ScoredGrant] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    limit: int = 20
    offset: int = 0
