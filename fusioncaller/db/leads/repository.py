"""
Repository for lead and appointment database operations.
"""

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.leads.model import Appointment, Lead
from fusioncaller.utils.logger import logger


class LeadRepository:
    """Repository for managing leads in the database."""

    def __init__(self, session: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_by_phone(self, organization_id: str, phone: str) -> Lead | None:
        result = await self.session.execute(
            select(Lead)
            .where(Lead.organization_id == organization_id)
            .where(Lead.phone == phone)
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, lead_id: str) -> Lead | None:
        result = await self.session.execute(select(Lead).where(Lead.id == lead_id))
        return result.scalar_one_or_none()

    async def upsert_by_phone(
        self, organization_id: str, phone: str, values: dict[str, Any]
    ) -> tuple[Lead, bool, str | None]:
        """
        Create the lead for (organization, phone) or update the existing one.

        Args:
            organization_id: Organization UUID
            phone: Lead phone number
            values: Column values to set

        Returns:
            tuple: (lead, created, previous status or None when created)
        """
        lead = await self.get_by_phone(organization_id, phone)
        if lead is None:
            lead = Lead(organization_id=organization_id, phone=phone, **values)
            self.session.add(lead)
            await self.session.flush()
            await self.session.refresh(lead)
            logger.info(
                "[LeadRepository] Created lead",
                lead_id=lead.id,
                organization_id=organization_id,
            )
            return lead, True, None

        previous_status = lead.status
        for key, value in values.items():
            setattr(lead, key, value)
        await self.session.flush()
        await self.session.refresh(lead)
        logger.info(
            "[LeadRepository] Updated lead",
            lead_id=lead.id,
            organization_id=organization_id,
        )
        return lead, False, previous_status

    async def set_status(self, lead_id: str, status: str) -> Lead | None:
        lead = await self.get_by_id(lead_id)
        if lead is None:
            return None
        lead.status = status
        await self.session.flush()
        return lead

    async def create_appointment(
        self,
        organization_id: str,
        lead_id: str,
        title: str,
        start_time: datetime,
        notes: str | None = None,
    ) -> Appointment:
        """
        Create a one-hour appointment for a lead.

        Args:
            organization_id: Organization UUID
            lead_id: Lead UUID
            title: Appointment title
            start_time: Start of the appointment
            notes: Optional notes

        Returns:
            Created appointment
        """
        appointment = Appointment(
            organization_id=organization_id,
            lead_id=lead_id,
            title=title,
            start_time=start_time,
            end_time=start_time + timedelta(hours=1),
            notes=notes,
        )
        self.session.add(appointment)
        await self.session.flush()
        return appointment

    async def find_appointment(self, lead_id: str, start_time: datetime) -> Appointment | None:
        result = await self.session.execute(
            select(Appointment)
            .where(Appointment.lead_id == lead_id)
            .where(Appointment.start_time == start_time)
            .limit(1)
        )
        return result.scalars().first()
