"""Usage statistics for an organization's billing period."""

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.billing.plans import UNLIMITED, outbound_limit
from fusioncaller.billing.schemas import BillingPeriod, UsageStats
from fusioncaller.billing.usage import effective_plan
from fusioncaller.db.disputes.repository import DisputeRepository
from fusioncaller.db.organizations.repository import OrganizationRepository
from fusioncaller.exceptions import OrganizationNotFoundError
from fusioncaller.utils.dates import utc_now


class UsageService:
    def __init__(self, session: AsyncSession):
        self.organizations = OrganizationRepository(session)
        self.disputes = DisputeRepository(session)

    async def get_usage_stats(self, organization_id: str) -> UsageStats:
        """
        Build usage statistics for the current month.

        A stored counter from an earlier period reads as zero.

        Args:
            organization_id: Organization UUID

        Returns:
            UsageStats: Usage, allowance and dispute counts

        Raises:
            OrganizationNotFoundError: If the organization does not exist
        """
        org = await self.organizations.get_by_id(organization_id)
        if not org:
            raise OrganizationNotFoundError(organization_id)

        now = utc_now()
        used = org.billable_calls_this_month or 0
        if org.billing_period_month != now.month or org.billing_period_year != now.year:
            used = 0

        plan = effective_plan(org)
        limit = outbound_limit(plan)

        period_start = datetime(now.year, now.month, 1, tzinfo=UTC)
        pending = await self.disputes.count_pending(organization_id)
        refunded = await self.disputes.count_refunded_since(organization_id, period_start)

        if limit == UNLIMITED:
            remaining = UNLIMITED
        elif limit == 0:
            remaining = 0
        else:
            remaining = max(0, limit - used + refunded)

        return UsageStats(
            organization_id=organization_id,
            plan=plan,
            billable_calls_this_month=used,
            monthly_limit=limit,
            remaining_calls=remaining,
            pending_disputes=pending,
            refunded_credits=refunded,
            billing_period=BillingPeriod(month=now.month, year=now.year),
        )
