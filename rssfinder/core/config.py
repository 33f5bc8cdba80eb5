from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="RSSFINDER_", extra="ignore")

    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "WARNING"

    # === Fetching ===
    FETCH_CONCURRENCY: int = Field(
        default=10,
        description="Maximum number of channel pages fetched and scanned at the same time.",
    )
    FETCH_TIMEOUT: float = Field(default=20.0, description="Per-request timeout in seconds")
    FETCH_MAX_ATTEMPTS: int = 3
    FETCH_RETRY_BASE_DELAY: float = 0.5
    FETCH_RETRY_MAX_DELAY: float = 8.0
    FETCH_RATE_LIMIT: float = 20.0  # requests/sec shared by every in-flight fetch
    FETCH_USER_AGENT: str = _DEFAULT_USER_AGENT
    # Without an explicit language YouTube may serve a consent page with no rssUrl in it
    FETCH_ACCEPT_LANGUAGE: str = "en-US,en;q=0.9"

    # === Extraction ===
    EXTRACT_MARKER: str = "rssUrl"
    EXTRACT_TAG: str = "script"

    # === Validators (fail at startup, not halfway through a run) ===

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the root log level name."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL must be a standard logging level, got {v!r}")
        return level

    @field_validator("FETCH_CONCURRENCY")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        """Validate the concurrency bound (number of stages in flight)."""
        if v < 1:
            raise ValueError("FETCH_CONCURRENCY must be >= 1")
        if v > 100:
            raise ValueError("FETCH_CONCURRENCY must be <= 100 (be polite to the remote host)")
        return v

    @field_validator("FETCH_TIMEOUT")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v < 1.0:
            raise ValueError("FETCH_TIMEOUT must be >= 1 second")
        if v > 300.0:
            raise ValueError("FETCH_TIMEOUT must be <= 300 seconds")
        return v

    @field_validator("FETCH_MAX_ATTEMPTS")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if not 1 <= v <= 10:
            raise ValueError("FETCH_MAX_ATTEMPTS must be between 1 and 10")
        return v

    @field_validator("FETCH_RETRY_BASE_DELAY", "FETCH_RETRY_MAX_DELAY")
    @classmethod
    def validate_delays(cls, v: float) -> float:
        """Validate retry backoff delays (seconds)."""
        if v < 0.0:
            raise ValueError("Retry delays must be >= 0 seconds")
        if v > 60.0:
            raise ValueError("Retry delays must be <= 60 seconds")
        return v

    @field_validator("FETCH_RATE_LIMIT")
    @classmethod
    def validate_rate_limit(cls, v: float) -> float:
        """Validate the shared fetch rate limit (requests per second)."""
        if v < 0.1:
            raise ValueError("Rate limit must be >= 0.1 requests/sec (minimum reasonable)")
        if v > 1000.0:
            raise ValueError("Rate limit must be <= 1000 requests/sec (reasonable max)")
        return v

    @field_validator("EXTRACT_MARKER", "EXTRACT_TAG")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("EXTRACT_MARKER and EXTRACT_TAG must not be blank")
        return v.strip()


settings = Settings()
