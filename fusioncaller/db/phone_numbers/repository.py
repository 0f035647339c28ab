"""
Repository for phone number lookups.
"""

import re

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.phone_numbers.model import PhoneNumber


def digits_only(value: str | None) -> str:
    return re.sub(r"\D", "", value or "")


class PhoneNumberRepository:
    """Lookups used to map a phone number back to its organization."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        organization_id: str,
        phone_number: str,
        provider_phone_id: str | None = None,
        friendly_name: str | None = None,
        type: str = "both",
    ) -> PhoneNumber:
        phone = PhoneNumber(
            organization_id=organization_id,
            phone_number=phone_number,
            provider_phone_id=provider_phone_id,
            friendly_name=friendly_name,
            type=type,
        )
        self.session.add(phone)
        await self.session.flush()
        await self.session.refresh(phone)
        return phone

    async def find_org_id_by_provider_id(self, provider_phone_id: str) -> str | None:
        """Organization owning the phone with this provider ID (column query)."""
        result = await self.session.execute(
            select(PhoneNumber.organization_id)
            .where(PhoneNumber.provider_phone_id == provider_phone_id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_by_provider_id(self, provider_phone_id: str) -> PhoneNumber | None:
        result = await self.session.execute(
            select(PhoneNumber)
            .where(PhoneNumber.provider_phone_id == provider_phone_id)
            .limit(1)
        )
        return result.scalars().first()

    async def find_org_id_by_number(self, phone_number: str) -> str | None:
        """Organization owning this exact E.164 number (column query)."""
        result = await self.session.execute(
            select(PhoneNumber.organization_id)
            .where(PhoneNumber.phone_number == phone_number)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_org_id_by_digits(self, phone_number: str) -> str | None:
        """
        Full scan comparing digits-only forms.

        Catches numbers stored in a different format ("(555) 123-4567",
        "15551234567"). A stored number matches when either digit string is
        a suffix of the other and the shorter one has at least 10 digits.

        Args:
            phone_number: Number in any format

        Returns:
            Organization ID or None
        """
        target = digits_only(phone_number)
        if len(target) < 10:
            return None

        result = await self.session.execute(
            select(PhoneNumber.organization_id, PhoneNumber.phone_number)
        )
        for organization_id, stored in result.all():
            candidate = digits_only(stored)
            if len(candidate) < 10:
                continue
            if candidate.endswith(target) or target.endswith(candidate):
                return organization_id
        return None
