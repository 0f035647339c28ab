"""
Provider webhook endpoints.

Webhooks are not authenticated: the provider calls them directly.
"""

from http import HTTPStatus
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from fusioncaller.utils.logger import logger
from fusioncaller.webhook.dependencies import get_webhook_service
from fusioncaller.webhook.schemas import AccessCheckResponse
from fusioncaller.webhook.service import INTERNAL_ERROR, WebhookService

router = APIRouter(prefix="/vapi", tags=["Webhooks"])


async def _read_payload(request: Request) -> dict[str, Any] | None:
    try:
        payload = await request.json()
    except ValueError as e:
        logger.error("[Webhook] Invalid JSON body", error=str(e))
        return None
    return payload if isinstance(payload, dict) else None


@router.post("/webhook")
async def vapi_webhook(
    request: Request,
    service: WebhookService = Depends(get_webhook_service),
) -> JSONResponse:
    """
    Receive a call event from the voice provider.

    Returns 200 when processed (including unattributed calls), 403 or 404
    when the organization is blocked or missing and 500 on errors.
    """
    payload = await _read_payload(request)
    if payload is None:
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR, content={"error": INTERNAL_ERROR}
        )

    result = await service.handle(payload)
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.get("/webhook")
async def vapi_webhook_status() -> dict[str, str]:
    return {"status": "ok", "message": "Vapi webhook endpoint is active"}


@router.post("/check-access", response_model=AccessCheckResponse)
async def check_access(
    request: Request,
    service: WebhookService = Depends(get_webhook_service),
) -> AccessCheckResponse:
    """Pre-call access check. Always 200, denies when in doubt."""
    payload = await _read_payload(request)
    if payload is None:
        return AccessCheckResponse(allowed=False, message="Invalid request body")
    return await service.check_access(payload)


@router.get("/check-access")
async def check_access_status() -> dict[str, str]:
    return {"status": "ok", "message": "Access check endpoint is active"}
