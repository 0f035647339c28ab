"""
FastAPI dependencies for database services.

Provides dependency injection for database-related services.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.database import get_db
from fusioncaller.db.organizations.service import OrganizationService


def get_organization_service(
    session: AsyncSession = Depends(get_db),
) -> OrganizationService:
    """
    FastAPI dependency for getting the organization service.

    Args:
        session: Database session from get_db dependency

    Returns:
        OrganizationService: Service instance with injected session
    """
    return OrganizationService(session)
