"""
Application settings using Pydantic.

Provides environment-based configuration loading with CLOUDWRIGHT_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from cloudwright.errors import ConfigurationError
from cloudwright.lifecycle.models import PollPolicy

PLATFORM_ENDPOINTS = {
    "prod": "https://api.blaxel.ai/v0",
    "dev": "https://api.blaxel.dev/v0",
}


class Settings(BaseSettings):
    """Application settings."""

    # Platform
    api_url: str | None = None
    env: str = "prod"
    workspace: str | None = None
    api_key: str | None = None

    # Server
    read_only: bool = False
    debug: bool = False
    toolsets: str = "all"

    # Status polling
    poll_max_attempts: int = 60
    poll_interval: float = 2.0
    poll_timeout: float | None = None

    # HTTP client settings
    http_timeout: float = 30.0
    http_max_retries: int = 3
    http_backoff_factor: float = 0.5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CLOUDWRIGHT_",
        extra="ignore",
    )

    def endpoint(self, env: str | None = None) -> str:
        """Explicit API URL, else the default endpoint for the environment."""
        if self.api_url:
            return self.api_url
        return PLATFORM_ENDPOINTS.get(env or self.env, PLATFORM_ENDPOINTS["prod"])

    def poll_policy(self) -> PollPolicy:
        try:
            return PollPolicy(
                max_attempts=self.poll_max_attempts,
                interval=self.poll_interval,
                timeout=self.poll_timeout,
            )
        except ValueError as exc:
            raise ConfigurationError(f"invalid polling settings: {exc}") from exc


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
