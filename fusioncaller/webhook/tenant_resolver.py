"""
Maps a webhook event to the organization that owns the call.

Lookups run in order: metadata organization ID, assistant ID, provider
phone number ID, exact E.164 number, digits-only scan. A lookup that hits a
database error is retried once with a broader query; if that also fails the
step counts as "no match" and resolution moves on.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.agent_configs.repository import AgentConfigRepository
from fusioncaller.db.organizations.repository import OrganizationRepository
from fusioncaller.db.phone_numbers.repository import PhoneNumberRepository
from fusioncaller.utils.logger import logger
from fusioncaller.utils.phone import format_phone_number
from fusioncaller.webhook.constants import CallDirection
from fusioncaller.webhook.schemas import WebhookEvent

T = TypeVar("T")


@dataclass
class TenantResolution:
    """Result of tenant resolution."""

    organization_id: str | None
    direction: CallDirection
    method: str | None = None

    @property
    def resolved(self) -> bool:
        return self.organization_id is not None


class TenantResolver:
    """Resolves the owning organization of a webhook event."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.organizations = OrganizationRepository(session)
        self.agent_configs = AgentConfigRepository(session)
        self.phone_numbers = PhoneNumberRepository(session)

    async def resolve(self, event: WebhookEvent) -> TenantResolution:
        """
        Resolve the organization for an event.

        Args:
            event: Normalized webhook event

        Returns:
            TenantResolution: Organization (or None) and the call direction,
            which an assistant match may refine
        """
        direction = event.direction

        org_id = event.organization_id_hint
        if org_id:
            exists = await self._lookup(
                "metadata",
                lambda: self.organizations.exists(org_id),
                lambda: self._org_row_exists(org_id),
            )
            if exists:
                return TenantResolution(org_id, direction, "metadata")
            logger.warning(
                "[Tenant Resolver] metadata.organizationId does not match an organization",
                organization_id=org_id,
                call_id=event.provider_call_id,
            )

        if event.assistant_id:
            match = await self._lookup(
                "assistant",
                lambda: self.agent_configs.find_by_assistant_id(event.assistant_id),
                lambda: self.agent_configs.find_by_assistant_id_full(event.assistant_id),
            )
            if match:
                org_id, agent_direction = match
                return TenantResolution(org_id, CallDirection(agent_direction), "assistant")

        if event.phone_number_id:
            org_id = await self._lookup(
                "provider_phone_id",
                lambda: self.phone_numbers.find_org_id_by_provider_id(event.phone_number_id),
                lambda: self._org_for_phone_entity(event.phone_number_id),
            )
            if org_id:
                return TenantResolution(org_id, direction, "provider_phone_id")

        for number in self._candidate_numbers(event):
            normalized = format_phone_number(number)
            org_id = await self._lookup(
                "phone_number",
                lambda: self.phone_numbers.find_org_id_by_number(normalized),
                lambda: self.phone_numbers.find_org_id_by_digits(normalized),
            )
            if org_id:
                return TenantResolution(org_id, direction, "phone_number")

            org_id = await self._lookup(
                "phone_digits",
                lambda: self.phone_numbers.find_org_id_by_digits(number),
                lambda: self.phone_numbers.find_org_id_by_digits(normalized),
            )
            if org_id:
                return TenantResolution(org_id, direction, "phone_digits")

        logger.warning(
            "[Tenant Resolver] Could not identify organization, failing open",
            call_id=event.provider_call_id,
            assistant_id=event.assistant_id,
            phone_number_id=event.phone_number_id,
            from_number=event.from_number,
            to_number=event.to_number,
            direction=direction.value,
        )
        return TenantResolution(None, direction)

    @staticmethod
    def _candidate_numbers(event: WebhookEvent) -> list[str]:
        """Our side of the call: the callee for inbound, the caller for outbound."""
        if event.direction == CallDirection.OUTBOUND:
            ordered = [event.from_number, event.to_number]
        else:
            ordered = [event.to_number, event.from_number]
        # Only fall back to the other side when the direction is unknown
        if event.direction != CallDirection.UNKNOWN:
            ordered = ordered[:1]
        return [n for n in ordered if n]

    async def _lookup(
        self,
        step: str,
        query: Callable[[], Awaitable[T]],
        broader_query: Callable[[], Awaitable[T]],
    ) -> T | None:
        try:
            return await query()
        except SQLAlchemyError as e:
            logger.warning(
                "[Tenant Resolver] Lookup failed, retrying with broader query",
                step=step,
                error=str(e),
            )

        try:
            await self.session.rollback()
            return await broader_query()
        except SQLAlchemyError as e:
            logger.error(
                "[Tenant Resolver] Lookup failed after retry", step=step, error=str(e)
            )
            return None

    async def _org_row_exists(self, org_id: str) -> bool:
        return await self.organizations.get_by_id(org_id) is not None

    async def _org_for_phone_entity(self, provider_phone_id: str) -> str | None:
        phone = await self.phone_numbers.get_by_provider_id(provider_phone_id)
        return phone.organization_id if phone else None
