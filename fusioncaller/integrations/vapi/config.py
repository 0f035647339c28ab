"""
Configuration for the Vapi call-control API.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fusioncaller.utils.logger import logger


class VapiSettings(BaseSettings):
    """Vapi-specific configuration."""

    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_prefix="VAPI_"
    )

    api_key: str | None = Field(
        default=None,
        description="Vapi API key. Call termination is disabled without it",
    )
    base_url: str = Field(
        default="https://api.vapi.ai", description="Vapi API base URL"
    )
    request_timeout: int = Field(
        default=10, description="HTTP request timeout in seconds"
    )


_vapi_settings: VapiSettings | None = None


def get_vapi_settings() -> VapiSettings:
    """
    Get the global Vapi settings instance.

    Returns:
        VapiSettings: The global Vapi settings instance
    """
    global _vapi_settings
    if _vapi_settings is None:
        _vapi_settings = VapiSettings()
        logger.info(
            "VapiSettings loaded",
            base_url=_vapi_settings.base_url,
            call_control_enabled=bool(_vapi_settings.api_key),
        )
    return _vapi_settings


def set_vapi_settings(settings: VapiSettings) -> None:
    """
    Set the global Vapi settings instance.

    Args:
        settings: The settings to set
    """
    global _vapi_settings
    _vapi_settings = settings
