"""Tests for ending calls through the Vapi API."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest
from vapi.core.api_error import ApiError

from fusioncaller.integrations.vapi.call_control import VapiCallControl
from fusioncaller.integrations.vapi.config import VapiSettings

SETTINGS = VapiSettings(api_key="vapi-key", base_url="https://api.vapi.test/")


def _sdk(delete: AsyncMock) -> SimpleNamespace:
    return SimpleNamespace(calls=SimpleNamespace(delete=delete))


class TestVapiCallControl:
    @pytest.mark.asyncio
    async def test_without_api_key_nothing_is_attempted(self):
        control = VapiCallControl(settings=VapiSettings(api_key=None))

        result = await control.terminate_call("call-1")

        assert control.enabled is False
        assert result.attempted is False
        assert result.terminated is False
        assert result.error == "disabled"

    @pytest.mark.asyncio
    async def test_delete_ends_the_call(self):
        delete = AsyncMock(return_value=None)
        control = VapiCallControl(settings=SETTINGS, client=_sdk(delete))

        result = await control.terminate_call("call-1")

        delete.assert_awaited_once_with(id="call-1")
        assert result.terminated is True
        assert result.method == "delete"

    @pytest.mark.asyncio
    async def test_patch_fallback_when_delete_fails(self):
        delete = AsyncMock(side_effect=ApiError(status_code=404, body="not found"))
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"id": "call-1", "status": "ended"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            control = VapiCallControl(settings=SETTINGS, client=_sdk(delete), http_client=http)
            result = await control.terminate_call("call-1")

        assert result.attempted is True
        assert result.terminated is True
        assert result.method == "patch"
        assert len(requests) == 1
        assert requests[0].method == "PATCH"
        assert str(requests[0].url) == "https://api.vapi.test/call/call-1"
        assert requests[0].headers["Authorization"] == "Bearer vapi-key"
        assert json.loads(requests[0].content) == {"status": "ended"}

    @pytest.mark.asyncio
    async def test_failed_patch_is_reported_not_raised(self):
        delete = AsyncMock(side_effect=httpx.ConnectError("connection refused"))
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))

        async with httpx.AsyncClient(transport=transport) as http:
            control = VapiCallControl(settings=SETTINGS, client=_sdk(delete), http_client=http)
            result = await control.terminate_call("call-1")

        assert result.attempted is True
        assert result.terminated is False
        assert result.error == "Failed to end call: 500 - boom"

    @pytest.mark.asyncio
    async def test_patch_transport_error_is_reported(self):
        delete = AsyncMock(side_effect=ApiError(status_code=400, body="bad"))

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            control = VapiCallControl(settings=SETTINGS, client=_sdk(delete), http_client=http)
            result = await control.terminate_call("call-1")

        assert result.terminated is False
        assert result.error.startswith("HTTP error ending call")
