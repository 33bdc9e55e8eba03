"""Centralized configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Hard ceiling for a single lookup, regardless of configuration
MAX_TIMEOUT_SECONDS = 30


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # External tools
    dig_binary: str = "dig"
    timeout_binary: str = "timeout"
    use_native_timeout: bool = True

    # Query defaults
    default_server: str = "8.8.8.8"
    default_timeout: int = 10
    max_timeout: int = MAX_TIMEOUT_SECONDS
    kill_grace_seconds: float = 2.0

    # Sentry configuration (optional)
    sentry_dsn: Optional[str] = None
    sentry_environment: str = "production"
    sentry_traces_sample_rate: float = 1.0

    log_level: str = "INFO"

    @property
    def timeout_ceiling(self) -> int:
        """Return the clamp ceiling, never above MAX_TIMEOUT_SECONDS."""
        if self.max_timeout <= 0:
            return MAX_TIMEOUT_SECONDS

        return min(self.max_timeout, MAX_TIMEOUT_SECONDS)

    @property
    def use_sentry(self) -> bool:
        """Check if Sentry is configured."""
        return bool(self.sentry_dsn)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
