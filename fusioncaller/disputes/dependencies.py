"""
FastAPI dependencies for disputes and usage.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.billing.service import UsageService
from fusioncaller.db.database import get_db
from fusioncaller.disputes.service import DisputeService


def get_dispute_service(session: AsyncSession = Depends(get_db)) -> DisputeService:
    return DisputeService(session)


def get_usage_service(session: AsyncSession = Depends(get_db)) -> UsageService:
    return UsageService(session)
