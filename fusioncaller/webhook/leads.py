"""
Derives leads, appointments and campaign contact outcomes from call events.
"""

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.calls.model import Call
from fusioncaller.db.calls.repository import CallRepository
from fusioncaller.db.campaign_contacts.repository import CampaignContactRepository
from fusioncaller.db.leads.repository import LeadRepository
from fusioncaller.utils.logger import logger
from fusioncaller.webhook.constants import (
    CallDirection,
    CallStatus,
    LeadSource,
    LeadStatus,
    PropertyType,
)
from fusioncaller.webhook.schemas import WebhookEvent

_NAME_PATTERN = re.compile(
    r"(?i:name is|i'm|i am|this is)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)"
)

_RESIDENTIAL_WORDS = ("residential", "house", "home")
_COMMERCIAL_WORDS = ("commercial", "business", "office")


def extract_name_from_transcript(transcript: str | None) -> str | None:
    """Pull a capitalized name after "my name is", "I'm", "I am" or "this is"."""
    if not transcript:
        return None
    match = _NAME_PATTERN.search(transcript)
    return match.group(1) if match else None


def map_property_type(value: str | None) -> PropertyType:
    if not value:
        return PropertyType.UNKNOWN
    lower = value.lower()
    if any(word in lower for word in _RESIDENTIAL_WORDS):
        return PropertyType.RESIDENTIAL
    if any(word in lower for word in _COMMERCIAL_WORDS):
        return PropertyType.COMMERCIAL
    return PropertyType.UNKNOWN


def lead_status_from_data(data: dict[str, Any]) -> LeadStatus:
    interested = data.get("interested")
    if interested is True:
        return LeadStatus.INTERESTED
    if interested is False:
        return LeadStatus.NOT_INTERESTED
    if data.get("wantsCallback"):
        return LeadStatus.CALLBACK
    return LeadStatus.NEW


def _appointment_time(data: dict[str, Any]) -> datetime | None:
    for value in (data.get("appointmentTime"), data.get("scheduledTime"), data.get("appointment")):
        if isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                continue
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value / 1000, tz=UTC)
    return None


@dataclass
class LeadOutcome:
    """What the extractor did for one event."""

    lead_id: str | None = None
    lead_status: str = LeadStatus.NEW.value
    created: bool = False
    previous_status: str | None = None
    stored_status: str | None = None
    has_appointment: bool = False
    appointment_id: str | None = None
    lead_data: dict[str, Any] = field(default_factory=dict)

    @property
    def status_changed(self) -> bool:
        return (
            self.lead_id is not None
            and not self.created
            and self.stored_status is not None
            and self.previous_status != self.stored_status
        )


class LeadExtractor:
    """Creates or updates the lead behind a call."""

    def __init__(self, session: AsyncSession):
        self.leads = LeadRepository(session)
        self.calls = CallRepository(session)
        self.campaign_contacts = CampaignContactRepository(session)

    def should_extract(self, event: WebhookEvent, direction: CallDirection, is_new_call: bool) -> bool:
        """
        Inbound calls produce a lead on their first event and again whenever
        structured data arrives. Other calls only with structured data.
        """
        if event.structured_data:
            return True
        return direction == CallDirection.INBOUND and is_new_call

    async def extract(
        self,
        event: WebhookEvent,
        call: Call,
        organization_id: str,
        direction: CallDirection,
        is_new_call: bool,
    ) -> LeadOutcome:
        """
        Create or update the lead for a call and link it to the call.

        Args:
            event: Normalized webhook event
            call: Stored call record
            organization_id: Owning organization
            direction: Resolved call direction
            is_new_call: Whether this event created the call row

        Returns:
            LeadOutcome: Lead status and change information
        """
        if not self.should_extract(event, direction, is_new_call):
            return LeadOutcome()

        data = event.structured_data or {}
        customer_number = call.to_number if direction == CallDirection.OUTBOUND else call.from_number
        phone = data.get("phone") or customer_number
        if not phone:
            logger.info(
                "[Webhook] No phone number for lead, skipping",
                call_id=call.id,
                organization_id=organization_id,
            )
            return LeadOutcome()

        status = lead_status_from_data(data)
        has_appointment = bool(data.get("appointment") or data.get("scheduledTime"))
        stored_status = LeadStatus.BOOKED if has_appointment else status

        values: dict[str, Any] = {
            "name": data.get("name") or extract_name_from_transcript(event.transcript),
            "email": data.get("email"),
            "address": data.get("address"),
            "city": data.get("city"),
            "state": data.get("state"),
            "zip_code": data.get("zipCode") or data.get("zip_code"),
            "service_type": data.get("serviceType") or data.get("service_type"),
            "notes": data.get("notes") or call.summary,
        }
        property_type = map_property_type(data.get("propertyType") or data.get("property_type"))
        # Without structured data only fill in what is known
        values = {k: v for k, v in values.items() if v is not None}
        if data:
            values["status"] = stored_status.value
            values["property_type"] = property_type.value

        existing = await self.leads.get_by_phone(organization_id, phone)
        if existing is None:
            values.setdefault("status", stored_status.value)
            values.setdefault("property_type", property_type.value)
            values["source"] = self._lead_source(event, direction).value

        lead, created, previous_status = await self.leads.upsert_by_phone(
            organization_id, phone, values
        )
        await self.calls.link_lead(call.id, lead.id)

        outcome = LeadOutcome(
            lead_id=lead.id,
            lead_status=status.value,
            created=created,
            previous_status=previous_status,
            stored_status=lead.status,
            has_appointment=has_appointment,
            lead_data={
                "name": lead.name,
                "phone": lead.phone,
                "business_name": data.get("businessName") or data.get("companyName"),
                "service_type": lead.service_type,
                "property_type": lead.property_type,
                "address": lead.address,
                "notes": lead.notes,
            },
        )

        if has_appointment:
            outcome.appointment_id = await self._create_appointment(
                data, organization_id, lead.id, lead.name, lead.service_type
            )

        return outcome

    async def update_campaign_contact(
        self,
        event: WebhookEvent,
        call: Call,
        organization_id: str,
        outcome: LeadOutcome,
    ) -> None:
        """Store the call outcome on the campaign contact named in metadata."""
        contact_id = event.campaign_contact_id
        if not contact_id:
            return

        if outcome.lead_status in (
            LeadStatus.INTERESTED.value,
            LeadStatus.CALLBACK.value,
            LeadStatus.NOT_INTERESTED.value,
        ):
            contact_status = outcome.lead_status
        elif call.status == CallStatus.VOICEMAIL.value:
            contact_status = "voicemail"
        elif call.status in (CallStatus.ANSWERED.value, CallStatus.COMPLETED.value):
            contact_status = "answered"
        else:
            contact_status = "no_answer"

        updated = await self.campaign_contacts.record_call_outcome(
            contact_id,
            organization_id,
            status=contact_status,
            outcome=call.status,
            duration_seconds=call.duration_seconds,
            summary=call.summary,
            converted_lead_id=outcome.lead_id,
        )
        if not updated:
            logger.warning(
                "[Webhook] Campaign contact not found",
                campaign_contact_id=contact_id,
                organization_id=organization_id,
            )

    @staticmethod
    def _lead_source(event: WebhookEvent, direction: CallDirection) -> LeadSource:
        if direction == CallDirection.INBOUND:
            return LeadSource.INBOUND
        if event.metadata.get("campaignId") or event.campaign_contact_id:
            return LeadSource.CAMPAIGN
        return LeadSource.MANUAL

    async def _create_appointment(
        self,
        data: dict[str, Any],
        organization_id: str,
        lead_id: str,
        lead_name: str | None,
        service_type: str | None,
    ) -> str | None:
        start_time = _appointment_time(data)
        if start_time is None:
            return None

        existing = await self.leads.find_appointment(lead_id, start_time)
        if existing:
            return existing.id

        appointment = await self.leads.create_appointment(
            organization_id=organization_id,
            lead_id=lead_id,
            title=f"Estimate for {lead_name or 'Lead'}",
            start_time=start_time,
            notes=f"Service: {service_type}" if service_type else None,
        )
        logger.info(
            "[Webhook] Appointment created",
            appointment_id=appointment.id,
            lead_id=lead_id,
            organization_id=organization_id,
        )
        return appointment.id
