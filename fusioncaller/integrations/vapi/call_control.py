"""
Vapi call-control client.

Used to end calls for organizations that lost access. Webhooks usually
arrive after the call has connected, so termination is best effort: every
failure is logged and reported in the result, never raised to the caller.
"""

from dataclasses import dataclass
from http import HTTPStatus

import httpx
from vapi import AsyncVapi
from vapi.core.api_error import ApiError

from fusioncaller.exceptions import VapiCallControlError
from fusioncaller.integrations.vapi.config import VapiSettings, get_vapi_settings
from fusioncaller.utils.logger import logger


@dataclass
class TerminationResult:
    """Outcome of a termination attempt."""

    attempted: bool
    terminated: bool
    method: str | None = None
    error: str | None = None


class VapiCallControl:
    """Ends live calls through the Vapi API (DELETE, then PATCH as fallback)."""

    def __init__(
        self,
        settings: VapiSettings | None = None,
        client: AsyncVapi | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._settings = settings or get_vapi_settings()
        self._client = client
        self._http_client = http_client
        if self._client is None and self._settings.api_key:
            self._client = AsyncVapi(
                token=self._settings.api_key,
                base_url=self._settings.base_url,
                timeout=self._settings.request_timeout,
            )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def terminate_call(self, call_id: str) -> TerminationResult:
        """
        Try to end a call, first by deleting it, then by patching its status.

        Args:
            call_id: Provider call ID

        Returns:
            TerminationResult: What was attempted and whether it worked
        """
        if not self.enabled:
            logger.warning(
                "[Vapi Call Control] VAPI_API_KEY not set, cannot terminate call",
                call_id=call_id,
            )
            return TerminationResult(attempted=False, terminated=False, error="disabled")

        logger.warning(
            "[Vapi Call Control] Terminating call. The call may already be "
            "connected, termination is not guaranteed",
            call_id=call_id,
        )

        try:
            await self._delete_call(call_id)
            logger.info("[Vapi Call Control] Call deleted", call_id=call_id)
            return TerminationResult(attempted=True, terminated=True, method="delete")
        except VapiCallControlError as e:
            logger.warning(
                "[Vapi Call Control] DELETE failed, trying PATCH",
                call_id=call_id,
                error=e.message,
            )

        try:
            await self._end_call(call_id)
            logger.info("[Vapi Call Control] Call status set to ended", call_id=call_id)
            return TerminationResult(attempted=True, terminated=True, method="patch")
        except VapiCallControlError as e:
            logger.error(
                "[Vapi Call Control] Failed to terminate call",
                call_id=call_id,
                error=e.message,
                status_code=e.status_code,
            )
            return TerminationResult(attempted=True, terminated=False, error=e.message)

    async def _delete_call(self, call_id: str) -> None:
        try:
            await self._client.calls.delete(id=call_id)
        except ApiError as e:
            raise VapiCallControlError(
                f"Failed to delete call: {e.status_code} - {e.body}",
                error_code="HTTP_ERROR",
                status_code=e.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise VapiCallControlError(
                f"HTTP error deleting call: {str(e)}", error_code="HTTP_ERROR"
            ) from e

    async def _end_call(self, call_id: str) -> None:
        url = f"{self._settings.base_url.rstrip('/')}/call/{call_id}"
        headers = {
            "Authorization": f"Bearer {self._settings.api_key}",
            "Content-Type": "application/json",
        }

        try:
            if self._http_client is not None:
                response = await self._http_client.patch(
                    url, headers=headers, json={"status": "ended"}
                )
            else:
                async with httpx.AsyncClient(timeout=self._settings.request_timeout) as client:
                    response = await client.patch(
                        url, headers=headers, json={"status": "ended"}
                    )
        except httpx.HTTPError as e:
            raise VapiCallControlError(
                f"HTTP error ending call: {str(e)}", error_code="HTTP_ERROR"
            ) from e

        if response.status_code not in (HTTPStatus.OK, HTTPStatus.ACCEPTED, HTTPStatus.NO_CONTENT):
            raise VapiCallControlError(
                f"Failed to end call: {response.status_code} - {response.text}",
                error_code="HTTP_ERROR",
                status_code=response.status_code,
            )


_call_control: VapiCallControl | None = None


def get_call_control() -> VapiCallControl:
    """Get the global call-control client."""
    global _call_control
    if _call_control is None:
        _call_control = VapiCallControl()
    return _call_control


def set_call_control(call_control: VapiCallControl | None) -> None:
    global _call_control
    _call_control = call_control
