"""Service layer for call disputes."""

from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.disputes.model import CallDispute
from fusioncaller.db.disputes.repository import DisputeRepository
from fusioncaller.db.organizations.repository import OrganizationRepository
from fusioncaller.disputes.schemas import DisputeCreate, DisputeReview
from fusioncaller.exceptions import DisputeError, OrganizationNotFoundError
from fusioncaller.utils.dates import utc_now
from fusioncaller.utils.logger import logger


class DisputeService:
    """Submission by organizations and review by admins."""

    def __init__(self, session: AsyncSession):
        self.disputes = DisputeRepository(session)
        self.organizations = OrganizationRepository(session)

    async def submit(self, organization_id: str, data: DisputeCreate) -> CallDispute:
        """
        File a dispute for a counted call.

        Args:
            organization_id: Organization UUID
            data: Dispute details

        Returns:
            The created dispute (status pending)

        Raises:
            OrganizationNotFoundError: If the organization does not exist
            DisputeError: DUPLICATE_DISPUTE if the call was already disputed
        """
        if not await self.organizations.exists(organization_id):
            raise OrganizationNotFoundError(organization_id)

        existing = await self.disputes.find_existing(
            organization_id,
            call_id=data.call_id,
            campaign_contact_id=data.campaign_contact_id,
        )
        if existing:
            raise DisputeError(
                "A dispute has already been submitted for this call", "DUPLICATE_DISPUTE"
            )

        dispute = await self.disputes.create(
            organization_id=organization_id,
            status="pending",
            **data.model_dump(),
        )
        logger.info(
            "[Disputes] Dispute submitted",
            dispute_id=dispute.id,
            organization_id=organization_id,
            call_id=data.call_id,
        )
        return dispute

    async def list_for_organization(self, organization_id: str) -> list[CallDispute]:
        if not await self.organizations.exists(organization_id):
            raise OrganizationNotFoundError(organization_id)
        return await self.disputes.list_for_organization(organization_id)

    async def list_all(
        self, status: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[CallDispute]:
        return await self.disputes.list_all(status=status, limit=limit, offset=offset)

    async def review(self, dispute_id: str, review: DisputeReview) -> CallDispute:
        """
        Approve or deny a pending dispute.

        Approval refunds one billable call to the organization's counter
        (never below zero) and marks the credit as refunded.

        Raises:
            DisputeError: DISPUTE_NOT_FOUND or DISPUTE_ALREADY_REVIEWED
        """
        dispute = await self.disputes.get_by_id(dispute_id)
        if not dispute:
            raise DisputeError(f"Dispute not found: {dispute_id}", "DISPUTE_NOT_FOUND")
        if dispute.status != "pending":
            raise DisputeError(
                f"Dispute already {dispute.status}", "DISPUTE_ALREADY_REVIEWED"
            )

        approved = review.status == "approved"
        claimed = await self.disputes.mark_reviewed(
            dispute_id,
            status=review.status,
            reviewed_by=review.reviewed_by,
            reviewed_at=utc_now(),
            admin_notes=review.admin_notes or None,
            credit_refunded=approved,
        )
        await self.disputes.session.refresh(dispute)
        if not claimed:
            # Another reviewer got there between the read and the update
            raise DisputeError(
                f"Dispute already {dispute.status}", "DISPUTE_ALREADY_REVIEWED"
            )

        usage = None
        if approved:
            usage = await self.organizations.refund_billable_call(dispute.organization_id)

        logger.info(
            "[Disputes] Dispute reviewed",
            dispute_id=dispute_id,
            organization_id=dispute.organization_id,
            status=review.status,
            reviewed_by=review.reviewed_by,
            billable_calls_this_month=usage,
        )
        return dispute
