"""Configuration management for the recommendation engine."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


BACKEND_VARS = [
    "SUPABASE_URL",
    "SUPABASE_KEY",
]


class Config(BaseSettings):
    """Application configuration from environment variables."""

    # Supabase backend (required only when ranking against the database)
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None

    # Ranking defaults
    default_limit: int = Field(default=20, ge=0)
    max_limit: int = Field(default=100, ge=1)
    min_score: float = Field(default=0.3, ge=0, le=1)
    exclude_overdue: bool = True

    # Optional
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "case_sensitive": False, "extra": "ignore"}

    def require_backend(self) -> None:
        """Raise ValueError listing ALL missing Supabase variables."""
        missing = [var for var in BACKEND_VARS if not getattr(self, var.lower())]
        if missing:
            names = ", ".join(missing)
            raise ValueError(
                f"Missing required environment variable(s): {names}. "
                "Please set them in your .env file or environment."
            )


def validate_config() -> Config:
    """Load and validate configuration from environment.

    Raises ValueError with a descriptive message naming every invalid
    variable (not just the first one).
    """
    try:
        return Config()
    except Exception as exc:
        fields = sorted(
            {str(err["loc"][0]).upper() for err in getattr(exc, "errors", lambda: [])() if err.get("loc")}
        )
        if fields:
            raise ValueError(
                f"Invalid environment variable(s): {', '.join(fields)}. {exc}"
            ) from exc
        raise


def load_config() -> Config:
    """Load configuration from environment (startup entry point)."""
    return validate_config()
