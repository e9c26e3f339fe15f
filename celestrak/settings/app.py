"""Client settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from celestrak.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)
from celestrak.fetch.config import ClientConfig


class CelestrakSettings(BaseSettings):
    """Environment configuration, read from ``CELESTRAK_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="CELESTRAK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0, le=10)
    retry_delay_seconds: float = Field(default=DEFAULT_RETRY_DELAY_SECONDS, ge=0.0)
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0.0)

    def to_client_config(self) -> ClientConfig:
        """Build a validated client configuration from these settings."""
        return ClientConfig(
            base_url=self.base_url,
            user_agent=self.user_agent,
            max_retries=self.max_retries,
            retry_delay_seconds=self.retry_delay_seconds,
            timeout_seconds=self.timeout_seconds,
        )


def get_settings() -> CelestrakSettings:
    """Get a settings instance."""
    return CelestrakSettings()
