"""API tests for usage statistics and call disputes."""

import pytest
import pytest_asyncio

from fusioncaller.conftest import create_organization
from fusioncaller.db.organizations.model import Organization
from fusioncaller.utils.dates import utc_now


def _dispute(**overrides) -> dict:
    body = {
        "call_id": "call-123",
        "call_date": "2026-03-02T15:30:00Z",
        "call_duration": 12,
        "call_outcome": "voicemail",
        "phone_number": "+14155550199",
        "reason": "Went straight to voicemail",
    }
    body.update(overrides)
    return body


@pytest_asyncio.fixture
async def org(session_factory):
    now = utc_now()
    return await create_organization(
        session_factory,
        plan="growth",
        billable_calls_this_month=3,
        billing_period_month=now.month,
        billing_period_year=now.year,
    )


class TestAuth:
    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, client, org):
        response = await client.get(f"/api/organizations/{org.id}/usage")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_wrong_token_is_401(self, client, org):
        response = await client.get(
            f"/api/organizations/{org.id}/usage",
            headers={"Authorization": "Bearer nope"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"


class TestUsage:
    @pytest.mark.asyncio
    async def test_usage_stats(self, client, auth_headers, org):
        response = await client.get(f"/api/organizations/{org.id}/usage", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["plan"] == "growth"
        assert body["billable_calls_this_month"] == 3
        assert body["monthly_limit"] == 500
        assert body["remaining_calls"] == 497
        assert body["pending_disputes"] == 0

    @pytest.mark.asyncio
    async def test_stale_period_reads_as_zero(self, client, auth_headers, session_factory):
        now = utc_now()
        org = await create_organization(
            session_factory,
            plan="growth",
            billable_calls_this_month=80,
            billing_period_month=now.month,
            billing_period_year=now.year - 1,
        )

        response = await client.get(f"/api/organizations/{org.id}/usage", headers=auth_headers)

        assert response.json()["billable_calls_this_month"] == 0

    @pytest.mark.asyncio
    async def test_unknown_organization(self, client, auth_headers):
        response = await client.get("/api/organizations/missing/usage", headers=auth_headers)

        assert response.status_code == 404


class TestDisputes:
    @pytest.mark.asyncio
    async def test_submit_and_list(self, client, auth_headers, org):
        response = await client.post(
            f"/api/organizations/{org.id}/disputes", json=_dispute(), headers=auth_headers
        )

        assert response.status_code == 201
        assert response.json()["status"] == "pending"

        listed = await client.get(f"/api/organizations/{org.id}/disputes", headers=auth_headers)
        assert listed.json()["total"] == 1

    @pytest.mark.asyncio
    async def test_duplicate_is_409(self, client, auth_headers, org):
        url = f"/api/organizations/{org.id}/disputes"
        await client.post(url, json=_dispute(), headers=auth_headers)

        response = await client.post(url, json=_dispute(), headers=auth_headers)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_call_reference_required(self, client, auth_headers, org):
        response = await client.post(
            f"/api/organizations/{org.id}/disputes",
            json=_dispute(call_id=None),
            headers=auth_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_approval_refunds_one_call(self, client, auth_headers, org, session_factory):
        created = await client.post(
            f"/api/organizations/{org.id}/disputes", json=_dispute(), headers=auth_headers
        )
        dispute_id = created.json()["id"]

        review = await client.post(
            f"/api/admin/disputes/{dispute_id}/review",
            json={"status": "approved", "reviewed_by": "ops@fusioncaller.test"},
            headers=auth_headers,
        )

        assert review.status_code == 200
        assert review.json()["credit_refunded"] is True

        async with session_factory() as session:
            stored = await session.get(Organization, org.id)
        assert stored.billable_calls_this_month == 2

        usage = await client.get(f"/api/organizations/{org.id}/usage", headers=auth_headers)
        assert usage.json()["refunded_credits"] == 1
        assert usage.json()["remaining_calls"] == 499

    @pytest.mark.asyncio
    async def test_denial_keeps_counter(self, client, auth_headers, org, session_factory):
        created = await client.post(
            f"/api/organizations/{org.id}/disputes", json=_dispute(), headers=auth_headers
        )

        review = await client.post(
            f"/api/admin/disputes/{created.json()['id']}/review",
            json={"status": "denied", "reviewed_by": "ops", "admin_notes": "Call was answered"},
            headers=auth_headers,
        )

        assert review.json()["credit_refunded"] is False
        async with session_factory() as session:
            stored = await session.get(Organization, org.id)
        assert stored.billable_calls_this_month == 3

    @pytest.mark.asyncio
    async def test_second_review_is_409(self, client, auth_headers, org):
        created = await client.post(
            f"/api/organizations/{org.id}/disputes", json=_dispute(), headers=auth_headers
        )
        url = f"/api/admin/disputes/{created.json()['id']}/review"
        body = {"status": "approved", "reviewed_by": "ops"}

        await client.post(url, json=body, headers=auth_headers)
        response = await client.post(url, json=body, headers=auth_headers)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_review_unknown_dispute_is_404(self, client, auth_headers):
        response = await client.post(
            "/api/admin/disputes/missing/review",
            json={"status": "approved", "reviewed_by": "ops"},
            headers=auth_headers,
        )

        assert response.status_code == 404
