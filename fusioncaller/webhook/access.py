"""
Decides whether an organization may keep receiving calls.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.organizations.model import Organization
from fusioncaller.db.organizations.repository import OrganizationRepository
from fusioncaller.utils.dates import as_utc, utc_now
from fusioncaller.utils.logger import logger

ORGANIZATION_NOT_FOUND = "Organization not found"
TRIAL_EXPIRED = "Trial expired"
NO_SUBSCRIPTION = "No active subscription or trial"


@dataclass
class AccessResult:
    has_access: bool
    reason: str

    @property
    def organization_missing(self) -> bool:
        return self.reason == ORGANIZATION_NOT_FOUND


def has_active_admin_plan(org: Organization) -> bool:
    """True when an admin-granted plan is set and not expired."""
    if not org.admin_granted_plan:
        return False
    expires_at = as_utc(org.admin_granted_plan_expires_at)
    return expires_at is None or expires_at > utc_now()


def evaluate_access(org: Organization | None) -> AccessResult:
    """
    Evaluate access for a loaded organization.

    Order: admin bypass, active admin-granted plan, paid plan, trial window.

    Args:
        org: Organization or None if it could not be loaded

    Returns:
        AccessResult: Decision and reason
    """
    if org is None:
        return AccessResult(False, ORGANIZATION_NOT_FOUND)

    privileges = org.admin_privileges or {}
    if privileges.get("bypass_limits") is True:
        return AccessResult(True, "admin_privilege_bypass")

    if has_active_admin_plan(org):
        return AccessResult(True, f"admin_granted_plan_{org.admin_granted_plan}")

    if org.plan:
        return AccessResult(True, "active_plan")

    trial_ends_at = as_utc(org.trial_ends_at)
    if trial_ends_at is not None:
        if utc_now() < trial_ends_at:
            return AccessResult(True, "active_trial")
        return AccessResult(False, TRIAL_EXPIRED)

    return AccessResult(False, NO_SUBSCRIPTION)


class AccessChecker:
    """Loads an organization and evaluates its access."""

    def __init__(self, session: AsyncSession):
        self.organizations = OrganizationRepository(session)

    async def check(self, organization_id: str) -> AccessResult:
        org = await self.organizations.get_for_access_check(organization_id)
        result = evaluate_access(org)
        if not result.has_access:
            logger.warning(
                "[Access] Access denied",
                organization_id=organization_id,
                reason=result.reason,
            )
        return result
