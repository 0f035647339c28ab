"""Service layer for organization administration and trials."""

import math
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.organizations.model import Organization
from fusioncaller.db.organizations.repository import OrganizationRepository
from fusioncaller.db.organizations.schemas import TrialStatus
from fusioncaller.exceptions import OrganizationNotFoundError, TrialError
from fusioncaller.utils.dates import as_utc, utc_now
from fusioncaller.utils.logger import logger

TRIAL_DURATION_DAYS = 15


class OrganizationService:
    """Admin overrides (plan grants, privileges) and trial lifecycle."""

    def __init__(self, session: AsyncSession):
        """
        Initialize the service.

        Args:
            session: Async database session
        """
        self.repository = OrganizationRepository(session)

    async def _require(self, org_id: str) -> Organization:
        org = await self.repository.get_by_id(org_id)
        if not org:
            raise OrganizationNotFoundError(org_id)
        return org

    async def grant_plan(
        self,
        org_id: str,
        plan: str,
        expires_at: datetime | None,
        notes: str | None,
        granted_by: str | None = None,
    ) -> Organization:
        """
        Grant a plan on top of (or instead of) the paid plan.

        Args:
            org_id: Organization UUID
            plan: Plan to grant (starter, growth, pro)
            expires_at: When the grant lapses, or None for no expiry
            notes: Free-form admin notes
            granted_by: Admin identifier for the audit log

        Returns:
            Updated organization

        Raises:
            OrganizationNotFoundError: If the organization does not exist
        """
        await self._require(org_id)
        org = await self.repository.update_fields(
            org_id,
            admin_granted_plan=plan,
            admin_granted_plan_expires_at=expires_at,
            admin_granted_plan_notes=notes or None,
        )
        logger.info(
            "[Admin] Plan granted",
            organization_id=org_id,
            plan=plan,
            expires_at=expires_at.isoformat() if expires_at else None,
            granted_by=granted_by,
        )
        return org

    async def revoke_plan(self, org_id: str, revoked_by: str | None = None) -> Organization:
        await self._require(org_id)
        org = await self.repository.update_fields(
            org_id,
            admin_granted_plan=None,
            admin_granted_plan_expires_at=None,
            admin_granted_plan_notes=None,
        )
        logger.info("[Admin] Plan grant revoked", organization_id=org_id, revoked_by=revoked_by)
        return org

    async def grant_privileges(
        self,
        org_id: str,
        privileges: dict[str, Any],
        notes: str | None,
        granted_by: str | None = None,
    ) -> Organization:
        """
        Merge privilege flags into the organization's existing privileges.

        Args:
            org_id: Organization UUID
            privileges: Flags to set, e.g. {"bypass_limits": True}
            notes: Free-form admin notes
            granted_by: Admin identifier for the audit log

        Returns:
            Updated organization

        Raises:
            OrganizationNotFoundError: If the organization does not exist
        """
        org = await self._require(org_id)
        # New dict so the JSON column is detected as changed
        merged = {**(org.admin_privileges or {}), **privileges}
        org = await self.repository.update_fields(
            org_id, admin_privileges=merged, admin_privileges_notes=notes or None
        )
        logger.info(
            "[Admin] Privileges granted",
            organization_id=org_id,
            privileges=merged,
            granted_by=granted_by,
        )
        return org

    async def revoke_privileges(
        self, org_id: str, revoked_by: str | None = None
    ) -> Organization:
        await self._require(org_id)
        org = await self.repository.update_fields(
            org_id, admin_privileges={}, admin_privileges_notes=None
        )
        logger.info("[Admin] Privileges revoked", organization_id=org_id, revoked_by=revoked_by)
        return org

    async def get_trial_status(self, org_id: str) -> TrialStatus:
        org = await self._require(org_id)
        now = utc_now()
        ends_at = as_utc(org.trial_ends_at)

        is_on_trial = ends_at is not None and now < ends_at
        days_remaining = 0
        if is_on_trial:
            days_remaining = math.ceil((ends_at - now).total_seconds() / 86400)

        return TrialStatus(
            is_on_trial=is_on_trial,
            trial_started_at=as_utc(org.trial_started_at),
            trial_ends_at=ends_at,
            days_remaining=days_remaining,
            is_expired=ends_at is not None and now >= ends_at,
            has_used_trial=bool(org.trial_used),
            can_start_trial=not org.trial_used and not org.plan,
        )

    async def start_trial(self, org_id: str) -> Organization:
        """
        Start the one-time free trial.

        Raises:
            OrganizationNotFoundError: If the organization does not exist
            TrialError: If the trial was already used or a plan is active
        """
        org = await self._require(org_id)
        if org.trial_used:
            raise TrialError("You have already used your free trial", "TRIAL_ALREADY_USED")
        if org.plan:
            raise TrialError(
                "You already have an active subscription", "SUBSCRIPTION_ACTIVE"
            )

        now = utc_now()
        org = await self.repository.update_fields(
            org_id,
            trial_started_at=now,
            trial_ends_at=now + timedelta(days=TRIAL_DURATION_DAYS),
            trial_used=True,
        )
        logger.info("[Trial] Trial started", organization_id=org_id)
        return org

    async def extend_trial(self, org_id: str, additional_days: int) -> Organization:
        """
        Push the trial end date out by ``additional_days``.

        Raises:
            OrganizationNotFoundError: If the organization does not exist
            TrialError: If the organization never had a trial
        """
        org = await self._require(org_id)
        if org.trial_ends_at is None:
            raise TrialError("No active trial to extend", "NO_TRIAL")

        new_end = as_utc(org.trial_ends_at) + timedelta(days=additional_days)
        org = await self.repository.update_fields(org_id, trial_ends_at=new_end)
        logger.info(
            "[Trial] Trial extended",
            organization_id=org_id,
            additional_days=additional_days,
            trial_ends_at=new_end.isoformat(),
        )
        return org

    async def cancel_trial(self, org_id: str) -> Organization:
        """End the trial immediately."""
        await self._require(org_id)
        org = await self.repository.update_fields(org_id, trial_ends_at=utc_now())
        logger.info("[Trial] Trial cancelled", organization_id=org_id)
        return org
