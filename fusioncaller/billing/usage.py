"""
Monthly usage counting for outbound calls.

Only finished outbound calls with a real conversation count. Each call is
counted at most once: the ``billed_at`` claim on the call row is a
conditional UPDATE, so duplicate end-of-call deliveries cannot double count.
"""

from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.billing.plans import UNLIMITED, outbound_limit
from fusioncaller.billing.stripe_client import OverageCharge, OverageCharger
from fusioncaller.db.calls.model import Call
from fusioncaller.db.calls.repository import CallRepository
from fusioncaller.db.organizations.model import Organization
from fusioncaller.db.organizations.repository import OrganizationRepository
from fusioncaller.exceptions import BillingError
from fusioncaller.utils.dates import utc_now
from fusioncaller.utils.logger import logger
from fusioncaller.webhook.access import has_active_admin_plan
from fusioncaller.webhook.constants import (
    BILLABLE_OUTCOMES,
    NON_BILLABLE_OUTCOMES,
    CallDirection,
    CallStatus,
    LeadStatus,
)


def resolve_outcome(lead_status: str | None, call_status: str) -> str:
    """
    Outcome used for billing.

    A decisive lead status wins, then an answered/completed call counts as
    "answered", otherwise the call status itself.
    """
    if lead_status in (
        LeadStatus.INTERESTED.value,
        LeadStatus.CALLBACK.value,
        LeadStatus.NOT_INTERESTED.value,
    ):
        return lead_status
    if call_status in (CallStatus.ANSWERED.value, CallStatus.COMPLETED.value):
        return "answered"
    return call_status


def is_billable(outcome: str) -> bool:
    return outcome in BILLABLE_OUTCOMES and outcome not in NON_BILLABLE_OUTCOMES


def effective_plan(org: Organization) -> str | None:
    """Active admin-granted plan, else the paid plan."""
    if has_active_admin_plan(org):
        return org.admin_granted_plan
    return org.plan


@dataclass
class OverageRequest:
    """Everything needed to charge one overage call outside the request."""

    customer_id: str
    organization_id: str
    call_id: str
    duration_seconds: int | None
    direction: str


@dataclass
class BillingResult:
    outcome: str | None = None
    billable: bool = False
    counted: bool = False
    usage: int | None = None
    limit: int | None = None
    overage: OverageRequest | None = None


class UsageBiller:
    """Counts billable calls and decides on overage charges."""

    def __init__(self, session: AsyncSession, charger: OverageCharger | None = None):
        self.session = session
        self.calls = CallRepository(session)
        self.organizations = OrganizationRepository(session)
        self.charger = charger or OverageCharger()

    @staticmethod
    def applies_to(direction: CallDirection, raw_status: str | None) -> bool:
        """Only finished outbound calls are billed."""
        return direction == CallDirection.OUTBOUND and raw_status in ("ended", "completed")

    async def bill_call(
        self,
        call: Call,
        organization_id: str,
        direction: CallDirection,
        raw_status: str | None,
        lead_status: str | None,
    ) -> BillingResult:
        """
        Count a finished call toward the organization's monthly usage.

        Database failures are logged and rolled back to a savepoint so they
        never fail the webhook.

        Args:
            call: Stored call record
            organization_id: Owning organization
            direction: Resolved call direction
            raw_status: Raw provider status of the event
            lead_status: Lead status derived from the call, if any

        Returns:
            BillingResult: Whether the call counted and any overage to charge
        """
        if not self.applies_to(direction, raw_status):
            return BillingResult()

        outcome = resolve_outcome(lead_status, call.status)
        if not is_billable(outcome):
            logger.info(
                "[Billing] Non-billable call, not counted",
                call_id=call.id,
                organization_id=organization_id,
                outcome=outcome,
            )
            return BillingResult(outcome=outcome)

        result = BillingResult(outcome=outcome, billable=True)
        try:
            async with self.session.begin_nested():
                if not await self.calls.claim_billing(call.id):
                    logger.info(
                        "[Billing] Call already counted",
                        call_id=call.id,
                        organization_id=organization_id,
                    )
                    return result

                now = utc_now()
                result.usage = await self.organizations.record_billable_call(
                    organization_id, now.month, now.year
                )
                result.counted = result.usage is not None
                org = await self.organizations.get_by_id(organization_id)
        except SQLAlchemyError as e:
            logger.error(
                "[Billing] Failed to count billable call",
                call_id=call.id,
                organization_id=organization_id,
                error=str(e),
            )
            return BillingResult(outcome=outcome, billable=True)

        logger.info(
            "[Billing] Billable call counted",
            call_id=call.id,
            organization_id=organization_id,
            outcome=outcome,
            usage=result.usage,
        )

        if org is not None and result.usage is not None:
            result.limit = outbound_limit(effective_plan(org))
            if self.should_charge_overage(org, result.usage):
                result.overage = OverageRequest(
                    customer_id=org.billing_customer_id,
                    organization_id=organization_id,
                    call_id=call.id,
                    duration_seconds=call.duration_seconds,
                    direction=direction.value,
                )
        return result

    def should_charge_overage(self, org: Organization, usage: int) -> bool:
        """
        Charge when usage after counting exceeds the plan allowance.

        Unlimited plans and organizations with ``unlimited_calls`` or
        ``bypass_limits`` are never charged, nor are organizations without
        a Stripe customer.
        """
        privileges = org.admin_privileges or {}
        if privileges.get("unlimited_calls") is True or privileges.get("bypass_limits") is True:
            return False

        limit = outbound_limit(effective_plan(org))
        if limit == UNLIMITED or limit < 0:
            return False
        if usage <= limit:
            return False

        if not org.billing_customer_id:
            logger.info(
                "[Billing] Over plan limit but no Stripe customer, not charging",
                organization_id=org.id,
                usage=usage,
                limit=limit,
            )
            return False
        return True

    async def charge_overage(self, request: OverageRequest) -> OverageCharge | None:
        """Charge an overage call. Errors are logged and swallowed."""
        try:
            return await self.charger.charge(
                customer_id=request.customer_id,
                organization_id=request.organization_id,
                call_id=request.call_id,
                duration_seconds=request.duration_seconds,
                direction=request.direction,
            )
        except BillingError as e:
            logger.error(
                "[Billing] Overage charge failed",
                organization_id=request.organization_id,
                call_id=request.call_id,
                error=e.message,
                error_code=e.error_code,
            )
            return None
