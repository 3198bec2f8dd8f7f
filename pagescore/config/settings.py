"""pagescore application settings loaded from environment variables."""

from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagescore.models.common import OverallScoreMode


class Environment(StrEnum):
    """Deployment environment."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Process-wide settings loaded from environment variables / .env file.

    Only deployment knobs live here. Scoring policy (weights, thresholds,
    rule constants) is ``ScoringConfig``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Engine execution ---
    RULE_TIMEOUT_SECONDS: float | None = Field(
        default=30.0,
        gt=0.0,
        description="Upper bound for a single awaitable rule evaluation.",
    )
    MAX_CONCURRENT_PAGES: int = Field(
        default=8,
        ge=1,
        description="Pages scored in parallel by batch scoring.",
    )
    CONCURRENT_RULES: bool = Field(
        default=True,
        description="Run rules of one dimension concurrently (False = sequential).",
    )
    OVERALL_SCORE_MODE: OverallScoreMode = Field(
        default=OverallScoreMode.WEIGHTED,
        description="Weighted or unweighted mean of dimension scores.",
    )

    # --- Logging ---
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Application log level.",
    )

    # --- Environment ---
    ENVIRONMENT: Environment = Field(
        default=Environment.DEV,
        description="Deployment environment (dev/staging/prod).",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == Environment.PROD


def get_settings() -> Settings:
    """Factory function for settings injection."""
    return Settings()
