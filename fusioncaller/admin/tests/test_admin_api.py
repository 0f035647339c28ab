"""API tests for admin organization management."""

from datetime import timedelta

import pytest

from fusioncaller.conftest import create_organization
from fusioncaller.utils.dates import utc_now


class TestOrganizations:
    @pytest.mark.asyncio
    async def test_create_and_list(self, client, auth_headers):
        created = await client.post(
            "/api/admin/organizations",
            json={"name": "Bright Solar", "plan": "growth", "timezone": "America/Denver"},
            headers=auth_headers,
        )

        assert created.status_code == 201
        assert created.json()["plan"] == "growth"

        listed = await client.get("/api/admin/organizations", headers=auth_headers)
        assert [o["name"] for o in listed.json()] == ["Bright Solar"]

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/api/admin/organizations")

        assert response.status_code == 401


class TestPlanGrants:
    @pytest.mark.asyncio
    async def test_grant_and_revoke(self, client, auth_headers, session_factory):
        org = await create_organization(session_factory)
        url = f"/api/admin/organizations/{org.id}/plan-grant"

        granted = await client.post(
            url,
            json={"plan": "pro", "notes": "Pilot customer", "granted_by": "ops"},
            headers=auth_headers,
        )
        assert granted.status_code == 200
        assert granted.json()["admin_granted_plan"] == "pro"

        revoked = await client.delete(url, headers=auth_headers)
        assert revoked.json()["admin_granted_plan"] is None

    @pytest.mark.asyncio
    async def test_granted_plan_lets_calls_through(self, client, auth_headers, session_factory):
        org = await create_organization(
            session_factory, trial_used=True, trial_ends_at=utc_now() - timedelta(days=3)
        )
        await client.post(
            f"/api/admin/organizations/{org.id}/plan-grant",
            json={"plan": "growth"},
            headers=auth_headers,
        )

        response = await client.post(
            "/api/vapi/check-access",
            json={"message": {"call": {"metadata": {"organizationId": org.id}}}},
        )

        assert response.json()["allowed"] is True
        assert response.json()["reason"] == "admin_granted_plan_growth"

    @pytest.mark.asyncio
    async def test_unknown_plan_is_422(self, client, auth_headers, session_factory):
        org = await create_organization(session_factory)

        response = await client.post(
            f"/api/admin/organizations/{org.id}/plan-grant",
            json={"plan": "platinum"},
            headers=auth_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_organization_is_404(self, client, auth_headers):
        response = await client.post(
            "/api/admin/organizations/missing/plan-grant",
            json={"plan": "pro"},
            headers=auth_headers,
        )

        assert response.status_code == 404


class TestPrivileges:
    @pytest.mark.asyncio
    async def test_flags_merge(self, client, auth_headers, session_factory):
        org = await create_organization(session_factory, admin_privileges={"unlimited_calls": True})

        response = await client.post(
            f"/api/admin/organizations/{org.id}/privileges",
            json={"bypass_limits": True, "notes": "Demo account"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["admin_privileges"] == {
            "unlimited_calls": True,
            "bypass_limits": True,
        }

    @pytest.mark.asyncio
    async def test_unknown_flag_is_rejected(self, client, auth_headers, session_factory):
        org = await create_organization(session_factory)

        response = await client.post(
            f"/api/admin/organizations/{org.id}/privileges",
            json={"superuser": True},
            headers=auth_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_revoke_clears_flags(self, client, auth_headers, session_factory):
        org = await create_organization(session_factory, admin_privileges={"bypass_limits": True})

        response = await client.delete(
            f"/api/admin/organizations/{org.id}/privileges", headers=auth_headers
        )

        assert response.json()["admin_privileges"] == {}


class TestTrials:
    @pytest.mark.asyncio
    async def test_start_once(self, client, auth_headers, session_factory):
        org = await create_organization(session_factory)
        url = f"/api/admin/organizations/{org.id}/trial"

        started = await client.post(url, headers=auth_headers)
        again = await client.post(url, headers=auth_headers)

        assert started.status_code == 200
        assert started.json()["trial_used"] is True
        assert again.status_code == 409

        status = await client.get(url, headers=auth_headers)
        assert status.json()["is_on_trial"] is True
        assert status.json()["days_remaining"] == 15
        assert status.json()["can_start_trial"] is False

    @pytest.mark.asyncio
    async def test_paid_plan_cannot_start_trial(self, client, auth_headers, session_factory):
        org = await create_organization(session_factory, plan="starter")

        response = await client.post(
            f"/api/admin/organizations/{org.id}/trial", headers=auth_headers
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_extend_and_cancel(self, client, auth_headers, session_factory):
        org = await create_organization(session_factory)
        base = f"/api/admin/organizations/{org.id}/trial"
        await client.post(base, headers=auth_headers)

        extended = await client.post(
            f"{base}/extend", json={"additional_days": 7}, headers=auth_headers
        )
        assert extended.status_code == 200
        status = await client.get(base, headers=auth_headers)
        assert status.json()["days_remaining"] == 22

        await client.post(f"{base}/cancel", headers=auth_headers)
        status = await client.get(base, headers=auth_headers)
        assert status.json()["is_on_trial"] is False
        assert status.json()["is_expired"] is True

    @pytest.mark.asyncio
    async def test_extend_without_trial_is_409(self, client, auth_headers, session_factory):
        org = await create_organization(session_factory)

        response = await client.post(
            f"/api/admin/organizations/{org.id}/trial/extend",
            json={"additional_days": 7},
            headers=auth_headers,
        )

        assert response.status_code == 409
