"""
Configuration management for the health checker.

Settings are read from environment variables prefixed with HEALTH_
(for example HEALTH_PORT=9000) and an optional .env file.
Priority: Environment variables > .env file > Pydantic defaults
"""

from functools import lru_cache
from typing import Tuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HealthSettings(BaseSettings):
    """Health checker configuration schema."""

    model_config = SettingsConfigDict(
        env_prefix="HEALTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # HTTP server
    host: str = Field(default="0.0.0.0", description="Host to bind to")
    port: int = Field(default=8080, ge=0, le=65535, description="Port to bind to")

    # Routes
    alive_path: str = Field(default="/alive", description="Liveness route")
    ready_path: str = Field(default="/ready", description="Readiness route")

    # Graceful shutdown
    shutdown_timeout: float = Field(
        default=0.1,
        gt=0,
        description="Maximum seconds to wait for in-flight requests on shutdown",
    )

    @field_validator("alive_path", "ready_path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate that route paths are absolute."""
        if not v.startswith("/"):
            raise ValueError(f"Route path must start with '/': {v!r}")
        return v

    @model_validator(mode="after")
    def validate_distinct_paths(self) -> "HealthSettings":
        """Validate that liveness and readiness use different routes."""
        if self.alive_path == self.ready_path:
            raise ValueError(
                f"alive_path and ready_path must differ (both {self.alive_path!r})"
            )
        return self

    @property
    def address(self) -> Tuple[str, int]:
        """Get the (host, port) address to bind to."""
        return (self.host, self.port)


@lru_cache()
def get_settings() -> HealthSettings:
    """
    Get cached settings instance.

    Returns:
        HealthSettings loaded from the environment
    """
    return HealthSettings()


def reset_settings() -> None:
    """Clear the cached settings (used by tests)."""
    get_settings.cache_clear()
