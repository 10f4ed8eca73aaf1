"""Grant - read-only catalog record scored by the recommendation engine."""

from datetime import date, datetime, time
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class Grant(BaseModel):
    """Normalized funding opportunity as populated by the ingestion pipeline.

    The engine never mutates a Grant; every nullable field has a defined
    scoring outcome when absent.
    """

    # Core identifiers
    id: str = Field(..., description="Catalog identifier")
    title: str = Field(default="", description="Opportunity title")
    funding_organization_name: Optional[str] = Field(None, description="Funding agency/organization")
    data_source: Optional[str] = Field(None, description="Ingestion source identifier")
    source_url: Optional[str] = Field(None, description="Link to source listing")
    status: Optional[str] = Field(None, description="open, forecasted, closed, ...")

    # Classification
    grant_type: Optional[str] = Field(None, description="Grant/category type")
    cfda_numbers: list[str] = Field(default_factory=list, description="Activity/CFDA codes")

    # Mandatory-filter flags
    cost_sharing: bool = Field(default=False, description="Cost sharing required")
    clinical_trial_allowed: Optional[bool] = Field(
        None, description="Clinical trials allowed; None means unconstrained"
    )

    # Financial
    funding_amount_min: Optional[float] = Field(None, ge=0, description="Funding floor")
    funding_amount_max: Optional[float] = Field(None, ge=0, description="Funding ceiling")

    # Dates
    application_deadline: Optional[datetime] = Field(None, description="Submission deadline")
    posted_date: Optional[datetime] = Field(None, description="Publication date")

    # Content used for keyword scoring and explanations
    summary: Optional[str] = Field(None, description="Short synopsis")
    description: Optional[str] = Field(None, description="Full description")
    eligibility_criteria: Optional[str] = Field(None, description="Eligibility text")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "id": "8b0e2c4e-8a51-4c7e-9f7e-2d1b4f0f6c11",
                "title": "Cancer Imaging Research Program (R01)",
                "funding_organization_name": "National Institutes of Health",
                "data_source": "nih",
                "grant_type": "R01",
                "cfda_numbers": ["93.394"],
                "cost_sharing": False,
                "clinical_trial_allowed": True,
                "funding_amount_min": 100000.0,
                "funding_amount_max": 500000.0,
                "application_deadline": "2026-12-01T00:00:00Z",
                "posted_date": "2026-10-10T00:00:00Z",
                "summary": "Supports imaging research in oncology",
            }
        },
    }

    @field_validator("application_deadline", "posted_date", mode="before")
    @classmethod
    def promote_dates(cls, v):
        """Accept plain dates by promoting them to midnight."""
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.min)
        return v

    @field_validator("cfda_numbers", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []

    @property
    def searchable_text(self) -> str:
        """Combined title/summary/description used for keyword matching."""
        return f"{self.title} {self.summary or ''} {self.description or ''}"
