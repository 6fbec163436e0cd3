"""Configuration management for the sampler task console."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Sampler Device Configuration
    device_base_url: str = Field(default="http://192.168.4.1", description="Sampler device HTTP root URL")
    device_timeout_seconds: float = Field(default=10.0, description="Timeout for device requests (in seconds)")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    environment: Literal["production", "development"] = Field(
        default="production", description="Runtime environment; development seeds demo tasks"
    )

    # Task Validation
    schema_profile: Literal["date_or_depth", "date_only"] = Field(
        default="date_or_depth", description="Validation profile used when the caller does not pick one"
    )

    # Status Polling
    status_poll_interval_seconds: float = Field(
        default=5.0, description="Delay between device status polls (in seconds)"
    )

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required setting is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The setting value

        Raises:
            ValueError: If the setting is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # Valve domain
    MIN_VALVE: int = 0
    MAX_VALVE: int = 23

    # Task configuration
    MAX_TASK_NAME_LENGTH: int = 24

    # Demo data (development only)
    DEMO_TASK_COUNT: int = 5
    DEMO_TASK_ID_MAX: int = 2147483647

    # Device utilities
    PRELOAD_TIMEOUT_SECONDS: float = 1.0


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
