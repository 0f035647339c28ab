"""Repository for organization database operations."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.organizations.model import Organization as OrganizationModel
from fusioncaller.db.organizations.schemas import OrganizationCreate
from fusioncaller.utils.logger import logger


class OrganizationRepository:
    """Repository for managing organizations in the database."""

    def __init__(self, session: AsyncSession):
        """
        Initialize the repository.

        Args:
            session: Async database session
        """
        self.session = session

    async def create(self, data: OrganizationCreate) -> OrganizationModel:
        """
        Create a new organization.

        Args:
            data: Organization creation data

        Returns:
            Created organization model
        """
        org = OrganizationModel(**data.model_dump(exclude_none=True))
        self.session.add(org)
        await self.session.flush()
        await self.session.refresh(org)
        return org

    async def get_by_id(self, org_id: str) -> OrganizationModel | None:
        """
        Get an organization by ID.

        Args:
            org_id: Organization UUID

        Returns:
            Organization model or None if not found
        """
        result = await self.session.execute(
            select(OrganizationModel).where(OrganizationModel.id == org_id)
        )
        return result.scalar_one_or_none()

    async def get_for_access_check(self, org_id: str) -> OrganizationModel | None:
        """
        Load an organization for an access decision without raising.

        A failed lookup is logged and retried once with a broader query
        (full row, no column restriction); a second failure is reported
        as "not found".

        Args:
            org_id: Organization UUID

        Returns:
            Organization model or None if missing or unreadable
        """
        try:
            return await self.get_by_id(org_id)
        except SQLAlchemyError as e:
            logger.warning(
                "[Access] Organization lookup failed, retrying",
                organization_id=org_id,
                error=str(e),
            )

        try:
            await self.session.rollback()
            return await self.session.get(
                OrganizationModel, org_id, populate_existing=True
            )
        except SQLAlchemyError as e:
            logger.error(
                "[Access] Organization lookup failed after retry",
                organization_id=org_id,
                error=str(e),
            )
            return None

    async def exists(self, org_id: str) -> bool:
        result = await self.session.execute(
            select(OrganizationModel.id).where(OrganizationModel.id == org_id)
        )
        return result.scalar_one_or_none() is not None

    async def update_fields(
        self, org_id: str, **values: Any
    ) -> OrganizationModel | None:
        """
        Set columns on an organization.

        Args:
            org_id: Organization UUID
            **values: Column values to set

        Returns:
            Updated organization or None if not found
        """
        org = await self.get_by_id(org_id)
        if not org:
            return None

        for key, value in values.items():
            setattr(org, key, value)

        await self.session.flush()
        await self.session.refresh(org)
        return org

    async def record_billable_call(self, org_id: str, month: int, year: int) -> int | None:
        """
        Count one billable call for the given billing period.

        The counter restarts at 1 when the stored (month, year) differs from
        the current one; otherwise it is incremented in place.

        Args:
            org_id: Organization UUID
            month: Current month (1-12)
            year: Current year

        Returns:
            The counter value after the update, or None if the org is missing
        """
        org = await self.get_by_id(org_id)
        if not org:
            return None

        if org.billing_period_month != month or org.billing_period_year != year:
            stmt = (
                update(OrganizationModel)
                .where(OrganizationModel.id == org_id)
                .values(
                    billable_calls_this_month=1,
                    billing_period_month=month,
                    billing_period_year=year,
                )
            )
        else:
            stmt = (
                update(OrganizationModel)
                .where(OrganizationModel.id == org_id)
                .values(
                    billable_calls_this_month=OrganizationModel.billable_calls_this_month
                    + 1
                )
            )

        await self.session.execute(stmt)
        await self.session.flush()
        await self.session.refresh(org)
        return org.billable_calls_this_month

    async def refund_billable_call(self, org_id: str) -> int | None:
        """
        Give back one billable call (approved dispute). Never goes below zero.

        Returns:
            The counter value after the update, or None if the org is missing
        """
        org = await self.get_by_id(org_id)
        if not org:
            return None

        if (org.billable_calls_this_month or 0) > 0:
            await self.session.execute(
                update(OrganizationModel)
                .where(OrganizationModel.id == org_id)
                .where(OrganizationModel.billable_calls_this_month > 0)
                .values(
                    billable_calls_this_month=OrganizationModel.billable_calls_this_month
                    - 1
                )
            )
            await self.session.flush()
            await self.session.refresh(org)

        return org.billable_calls_this_month

    async def list_all(
        self, limit: int = 100, offset: int = 0
    ) -> list[OrganizationModel]:
        """
        List all organizations with pagination.

        Args:
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            List of organization models
        """
        result = await self.session.execute(
            select(OrganizationModel)
            .order_by(OrganizationModel.created_at)
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())
