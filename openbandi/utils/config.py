"""Application settings.

Pydantic-based configuration loaded from environment variables (prefix
``OPENBANDI_``) and an optional ``.env`` file.

Environment Variables:
- OPENBANDI_DATABASE_URL: SQLAlchemy URL of the ledger (default: sqlite:///./openbandi.db)
- OPENBANDI_MIN_CONFIDENCE: Auto-reconciliation threshold, 0-100 (default: 70)
- OPENBANDI_REVIEW_CONFIDENCE: Lowest score shown for manual review (default: 30)
- OPENBANDI_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- OPENBANDI_METRICS_ENABLED: Expose Prometheus metrics (default: false)
"""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from openbandi.exceptions import ConfigurationError


class Settings(BaseSettings):
    """OpenBandi configuration.

    Example:
        >>> settings = Settings(min_confidence=80)
        >>> settings.review_confidence
        30
    """

    model_config = SettingsConfigDict(
        env_prefix="OPENBANDI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    database_url: str = Field(
        default="sqlite:///./openbandi.db",
        description="SQLAlchemy URL of the ledger holding bank transactions and expenses",
    )

    # Reconciliation thresholds (0-100 confidence points)
    min_confidence: int = Field(
        default=70,
        ge=0,
        le=100,
        description="Minimum confidence for automatic reconciliation",
    )
    review_confidence: int = Field(
        default=30,
        ge=0,
        le=100,
        description="Minimum confidence for a pairing to be listed for manual review",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    json_logs: bool = Field(default=False, description="Emit JSON log lines")
    dev_mode: bool = Field(default=True, description="Colourful console log output")

    # Metrics
    metrics_enabled: bool = Field(default=False, description="Start Prometheus exporter")
    metrics_port: int = Field(default=8000, ge=1, le=65535)

    @model_validator(mode="after")
    def _check_thresholds(self) -> "Settings":
        if self.review_confidence > self.min_confidence:
            raise ConfigurationError(
                "review_confidence cannot exceed min_confidence",
                setting="review_confidence",
                expected=f"<= {self.min_confidence}",
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Drop cached settings and read the environment again."""
    get_settings.cache_clear()
    return get_settings()
