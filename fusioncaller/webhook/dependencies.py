"""
FastAPI dependencies for webhook processing.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.database import get_db
from fusioncaller.integrations.vapi.call_control import get_call_control
from fusioncaller.notifications.notifier import Notifier
from fusioncaller.webhook.service import WebhookService


def get_webhook_service(session: AsyncSession = Depends(get_db)) -> WebhookService:
    """
    FastAPI dependency for getting the webhook service.

    Args:
        session: Database session from get_db dependency

    Returns:
        WebhookService: Service bound to the request session
    """
    return WebhookService(session, call_control=get_call_control(), notifier=Notifier())
