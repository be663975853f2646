"""
Configuration management for the call forwarding workflow.

This module handles environment variable configuration for the backend
state store connection using Pydantic settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from call_forwarding.utils.logger import logger


class ForwardingSettings(BaseSettings):
    """Configuration for the forwarding backend using Pydantic settings."""

    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_prefix="FORWARDING_"
    )

    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the backend that stores forwarding state",
    )
    timeout: float = Field(default=15.0, description="Request timeout in seconds")
    rate_limit_cooldown_seconds: int = Field(
        default=60,
        ge=1,
        description="Cooldown shown after a 429 when the backend sends no Retry-After",
    )
    use_remote_catalog: bool = Field(
        default=True,
        description="Load the carrier list from the backend instead of the packaged list",
    )
    session_ttl_seconds: int = Field(
        default=1800,
        ge=1,
        description="Idle time after which an operator session is closed",
    )
    max_sessions: int = Field(
        default=1000, ge=1, description="Operator sessions kept open at once"
    )


# Global settings instance
_forwarding_settings: ForwardingSettings | None = None


def get_forwarding_settings() -> ForwardingSettings:
    """
    Get the global forwarding settings instance.

    Returns:
        ForwardingSettings: The global settings instance
    """
    global _forwarding_settings
    if _forwarding_settings is None:
        _forwarding_settings = ForwardingSettings()
        logger.info("ForwardingSettings loaded", api_base_url=_forwarding_settings.api_base_url)
    return _forwarding_settings


def set_forwarding_settings(settings: ForwardingSettings) -> None:
    """
    Set the global forwarding settings instance.

    Args:
        settings: The settings to set
    """
    global _forwarding_settings
    _forwarding_settings = settings
