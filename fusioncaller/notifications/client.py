"""
Twilio SMS client wrapper for async operations.

Wraps the synchronous Twilio SDK with asyncio.to_thread.
"""

import asyncio

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from fusioncaller.exceptions import NotificationError
from fusioncaller.notifications.config import TwilioSettings, get_twilio_settings
from fusioncaller.utils.logger import logger


class TwilioSMSClient:
    """Async wrapper for Twilio Messaging operations."""

    def __init__(self, settings: TwilioSettings | None = None, client: Client | None = None):
        """
        Initialize client wrapper.

        Args:
            settings: Twilio settings (defaults to the global settings)
            client: Preconfigured Twilio REST client
        """
        self._settings = settings or get_twilio_settings()
        self._client = client
        if self._client is None and self._settings.configured:
            self._client = Client(self._settings.account_sid, self._settings.auth_token)

    @property
    def enabled(self) -> bool:
        return self._client is not None and bool(self._settings.phone_number)

    async def send_sms(self, to: str, body: str) -> str:
        """
        Send an SMS message.

        Args:
            to: Recipient phone number (E.164 format)
            body: Message text

        Returns:
            str: Twilio message SID

        Raises:
            NotificationError: If SMS is not configured or Twilio rejects the message
        """
        if not self.enabled:
            raise NotificationError("SMS not configured", "SMS_NOT_CONFIGURED")

        try:
            message = await asyncio.to_thread(
                self._client.messages.create,
                to=to,
                from_=self._settings.phone_number,
                body=body,
            )
        except TwilioRestException as e:
            logger.error("[Notifier] Twilio error", status=e.status, error=e.msg)
            raise NotificationError(f"Failed to send SMS: {e.msg}", "TWILIO_ERROR") from e

        logger.info("[Notifier] SMS sent", message_sid=message.sid)
        return message.sid


_sms_client: TwilioSMSClient | None = None


def get_sms_client() -> TwilioSMSClient:
    global _sms_client
    if _sms_client is None:
        _sms_client = TwilioSMSClient()
    return _sms_client


def set_sms_client(client: TwilioSMSClient | None) -> None:
    global _sms_client
    _sms_client = client
