"""Tests for billable call counting and overage decisions."""

from datetime import timedelta

import pytest

from fusioncaller.billing.config import StripeSettings
from fusioncaller.billing.plans import outbound_limit
from fusioncaller.billing.stripe_client import OverageCharge, OverageCharger
from fusioncaller.billing.usage import (
    OverageRequest,
    UsageBiller,
    effective_plan,
    is_billable,
    resolve_outcome,
)
from fusioncaller.conftest import create_organization
from fusioncaller.db.calls.repository import CallRepository
from fusioncaller.db.organizations.model import Organization
from fusioncaller.exceptions import BillingError
from fusioncaller.utils.dates import utc_now
from fusioncaller.webhook.constants import CallDirection


class FakeCharger:
    def __init__(self, fail: bool = False):
        self.charges = []
        self.fail = fail

    async def charge(self, **kwargs) -> OverageCharge:
        if self.fail:
            raise BillingError("Stripe error: card declined", "STRIPE_ERROR")
        self.charges.append(kwargs)
        return OverageCharge(invoice_item_id="ii_1", amount_cents=15, minutes=1)


class TestOutcome:
    @pytest.mark.parametrize(
        "lead_status,call_status,expected",
        [
            ("interested", "completed", "interested"),
            ("callback", "completed", "callback"),
            ("not_interested", "completed", "not_interested"),
            ("new", "completed", "answered"),
            (None, "answered", "answered"),
            (None, "voicemail", "voicemail"),
            (None, "failed", "failed"),
        ],
    )
    def test_resolve_outcome(self, lead_status, call_status, expected):
        assert resolve_outcome(lead_status, call_status) == expected

    def test_billable_outcomes(self):
        assert is_billable("answered")
        assert is_billable("interested")
        assert not is_billable("voicemail")
        assert not is_billable("no_answer")
        assert not is_billable("something_else")

    def test_applies_only_to_finished_outbound(self):
        assert UsageBiller.applies_to(CallDirection.OUTBOUND, "ended")
        assert UsageBiller.applies_to(CallDirection.OUTBOUND, "completed")
        assert not UsageBiller.applies_to(CallDirection.INBOUND, "ended")
        assert not UsageBiller.applies_to(CallDirection.OUTBOUND, "in-progress")


class TestPlans:
    def test_limits(self):
        assert outbound_limit("starter") == 0
        assert outbound_limit("growth") == 500
        assert outbound_limit(None) == 0
        assert outbound_limit("enterprise") == 0

    def test_admin_grant_overrides_paid_plan(self):
        org = Organization(
            plan="starter",
            admin_granted_plan="pro",
            admin_granted_plan_expires_at=utc_now() + timedelta(days=1),
        )
        assert effective_plan(org) == "pro"

    def test_expired_admin_grant_is_ignored(self):
        org = Organization(
            plan="starter",
            admin_granted_plan="pro",
            admin_granted_plan_expires_at=utc_now() - timedelta(days=1),
        )
        assert effective_plan(org) == "starter"


class TestShouldChargeOverage:
    def _biller(self):
        return UsageBiller(session=None, charger=FakeCharger())

    def test_within_allowance(self):
        org = Organization(id="o", plan="growth", billing_customer_id="cus_1", admin_privileges={})
        assert self._biller().should_charge_overage(org, 500) is False

    def test_over_allowance(self):
        org = Organization(id="o", plan="growth", billing_customer_id="cus_1", admin_privileges={})
        assert self._biller().should_charge_overage(org, 501) is True

    def test_unlimited_calls_privilege(self):
        org = Organization(
            id="o",
            plan="starter",
            billing_customer_id="cus_1",
            admin_privileges={"unlimited_calls": True},
        )
        assert self._biller().should_charge_overage(org, 10) is False

    def test_no_stripe_customer(self):
        org = Organization(id="o", plan="starter", admin_privileges={})
        assert self._biller().should_charge_overage(org, 1) is False


class TestPriceCents:
    @pytest.mark.parametrize(
        "duration,minutes",
        [(None, 1), (0, 1), (59, 1), (60, 1), (61, 2), (600, 10)],
    )
    def test_started_minutes(self, duration, minutes):
        charger = OverageCharger(StripeSettings(api_key=None, overage_cents_per_minute=15))
        assert charger.price_cents(duration) == (minutes, minutes * 15)

    @pytest.mark.asyncio
    async def test_charge_without_api_key_raises(self):
        charger = OverageCharger(StripeSettings(api_key=None))
        with pytest.raises(BillingError):
            await charger.charge("cus_1", "org-1", "call-1", 30, "outbound")


class TestBillCall:
    async def _finished_call(self, session, organization_id, provider_call_id="vapi-1"):
        call, _ = await CallRepository(session).upsert_call(
            provider_call_id,
            status="completed",
            direction="outbound",
            organization_id=organization_id,
            duration_seconds=75,
        )
        return call

    @pytest.mark.asyncio
    async def test_counts_once(self, session_factory, session):
        org = await create_organization(session_factory, plan="growth")
        call = await self._finished_call(session, org.id)
        biller = UsageBiller(session, charger=FakeCharger())

        first = await biller.bill_call(call, org.id, CallDirection.OUTBOUND, "ended", "interested")
        second = await biller.bill_call(call, org.id, CallDirection.OUTBOUND, "ended", "interested")

        assert first.counted is True
        assert first.usage == 1
        assert first.limit == 500
        assert first.overage is None
        assert second.billable is True
        assert second.counted is False

    @pytest.mark.asyncio
    async def test_non_billable_outcome(self, session_factory, session):
        org = await create_organization(session_factory, plan="growth")
        call = await self._finished_call(session, org.id)
        call.status = "voicemail"

        result = await UsageBiller(session, charger=FakeCharger()).bill_call(
            call, org.id, CallDirection.OUTBOUND, "ended", None
        )

        assert result.billable is False
        assert result.outcome == "voicemail"

    @pytest.mark.asyncio
    async def test_over_limit_requests_overage(self, session_factory, session):
        org = await create_organization(
            session_factory, plan="starter", billing_customer_id="cus_123"
        )
        call = await self._finished_call(session, org.id)

        result = await UsageBiller(session, charger=FakeCharger()).bill_call(
            call, org.id, CallDirection.OUTBOUND, "ended", "callback"
        )

        assert result.overage == OverageRequest(
            customer_id="cus_123",
            organization_id=org.id,
            call_id=call.id,
            duration_seconds=75,
            direction="outbound",
        )

    @pytest.mark.asyncio
    async def test_charge_overage_uses_charger(self, session):
        charger = FakeCharger()
        request = OverageRequest("cus_1", "org-1", "call-1", 75, "outbound")

        charge = await UsageBiller(session, charger=charger).charge_overage(request)

        assert charge.invoice_item_id == "ii_1"
        assert charger.charges[0]["customer_id"] == "cus_1"

    @pytest.mark.asyncio
    async def test_charge_overage_failure_is_logged(self, session):
        request = OverageRequest("cus_1", "org-1", "call-1", 75, "outbound")

        charge = await UsageBiller(session, charger=FakeCharger(fail=True)).charge_overage(request)

        assert charge is None
