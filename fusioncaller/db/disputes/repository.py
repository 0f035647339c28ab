"""
Repository for call dispute database operations.
"""

from datetime import datetime

from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.disputes.model import CallDispute


class DisputeRepository:
    """Repository for managing call disputes in the database."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **values) -> CallDispute:
        dispute = CallDispute(**values)
        self.session.add(dispute)
        await self.session.flush()
        await self.session.refresh(dispute)
        return dispute

    async def get_by_id(self, dispute_id: str) -> CallDispute | None:
        result = await self.session.execute(
            select(CallDispute).where(CallDispute.id == dispute_id)
        )
        return result.scalar_one_or_none()

    async def mark_reviewed(
        self,
        dispute_id: str,
        status: str,
        reviewed_by: str,
        reviewed_at: datetime,
        admin_notes: str | None = None,
        credit_refunded: bool = False,
    ) -> bool:
        """
        Record a review decision, only while the dispute is still pending.

        Returns:
            bool: True if this call moved the dispute out of pending
        """
        result = await self.session.execute(
            update(CallDispute)
            .where(CallDispute.id == dispute_id)
            .where(CallDispute.status == "pending")
            .values(
                status=status,
                admin_notes=admin_notes,
                reviewed_by=reviewed_by,
                reviewed_at=reviewed_at,
                credit_refunded=credit_refunded,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def find_existing(
        self,
        organization_id: str,
        call_id: str | None = None,
        campaign_contact_id: str | None = None,
    ) -> CallDispute | None:
        """
        Find a dispute already filed for the same call or campaign contact.

        Args:
            organization_id: Organization UUID
            call_id: Disputed call ID
            campaign_contact_id: Disputed campaign contact ID

        Returns:
            The existing dispute or None
        """
        stmt = select(CallDispute).where(CallDispute.organization_id == organization_id)
        if call_id:
            stmt = stmt.where(CallDispute.call_id == call_id)
        elif campaign_contact_id:
            stmt = stmt.where(CallDispute.campaign_contact_id == campaign_contact_id)
        else:
            return None

        result = await self.session.execute(stmt.limit(1))
        return result.scalars().first()

    async def list_for_organization(self, organization_id: str) -> list[CallDispute]:
        result = await self.session.execute(
            select(CallDispute)
            .where(CallDispute.organization_id == organization_id)
            .order_by(desc(CallDispute.created_at))
        )
        return list(result.scalars().all())

    async def list_all(
        self, status: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[CallDispute]:
        stmt = select(CallDispute).order_by(desc(CallDispute.created_at))
        if status:
            stmt = stmt.where(CallDispute.status == status)
        result = await self.session.execute(stmt.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def count_pending(self, organization_id: str) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(CallDispute)
            .where(CallDispute.organization_id == organization_id)
            .where(CallDispute.status == "pending")
        )
        return result.scalar_one()

    async def count_refunded_since(self, organization_id: str, since: datetime) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(CallDispute)
            .where(CallDispute.organization_id == organization_id)
            .where(CallDispute.status == "approved")
            .where(CallDispute.credit_refunded.is_(True))
            .where(CallDispute.reviewed_at >= since)
        )
        return result.scalar_one()
