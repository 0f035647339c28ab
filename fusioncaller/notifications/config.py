"""
Twilio configuration for SMS notifications.

One Twilio account sends notifications for every tenant; each organization
only configures the phone number that receives them.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fusioncaller.utils.logger import logger


class TwilioSettings(BaseSettings):
    """Twilio account configuration. SMS is disabled when incomplete."""

    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_prefix="TWILIO_"
    )

    account_sid: str | None = Field(default=None, description="Twilio Account SID (ACxxx)")
    auth_token: str | None = Field(default=None, description="Twilio Auth Token")
    phone_number: str | None = Field(
        default=None, description="Sender phone number (E.164 format)"
    )

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.phone_number)


_twilio_settings: TwilioSettings | None = None


def get_twilio_settings() -> TwilioSettings:
    global _twilio_settings
    if _twilio_settings is None:
        _twilio_settings = TwilioSettings()
        logger.info("TwilioSettings loaded", sms_enabled=_twilio_settings.configured)
    return _twilio_settings


def set_twilio_settings(settings: TwilioSettings) -> None:
    global _twilio_settings
    _twilio_settings = settings
