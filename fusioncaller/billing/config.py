"""
Configuration for Stripe overage billing.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fusioncaller.utils.logger import logger


class StripeSettings(BaseSettings):
    """Stripe configuration."""

    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_prefix="STRIPE_"
    )

    api_key: str | None = Field(
        default=None, description="Stripe secret key. Overage charges are skipped without it"
    )
    overage_cents_per_minute: int = Field(
        default=15, description="Overage price per started call minute, in cents"
    )
    currency: str = Field(default="usd", description="Invoice item currency")


_stripe_settings: StripeSettings | None = None


def get_stripe_settings() -> StripeSettings:
    """
    Get the global Stripe settings instance.

    Returns:
        StripeSettings: The global settings instance
    """
    global _stripe_settings
    if _stripe_settings is None:
        _stripe_settings = StripeSettings()
        logger.info(
            "StripeSettings loaded",
            overage_enabled=bool(_stripe_settings.api_key),
            overage_cents_per_minute=_stripe_settings.overage_cents_per_minute,
        )
    return _stripe_settings


def set_stripe_settings(settings: StripeSettings) -> None:
    """
    Set the global Stripe settings instance.

    Args:
        settings: The settings to set
    """
    global _stripe_settings
    _stripe_settings = settings
