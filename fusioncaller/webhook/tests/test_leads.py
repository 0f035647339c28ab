"""Tests for lead extraction."""

import pytest
from sqlalchemy import select

from fusioncaller.conftest import CUSTOMER_PHONE, create_organization, vapi_payload
from fusioncaller.db.calls.repository import CallRepository
from fusioncaller.db.campaign_contacts.model import CampaignContact
from fusioncaller.db.leads.model import Appointment, Lead
from fusioncaller.webhook.constants import CallDirection, LeadStatus, PropertyType
from fusioncaller.webhook.leads import (
    LeadExtractor,
    extract_name_from_transcript,
    lead_status_from_data,
    map_property_type,
)
from fusioncaller.webhook.recorder import CallRecorder
from fusioncaller.webhook.schemas import WebhookEvent


class TestHelpers:
    @pytest.mark.parametrize(
        "transcript,name",
        [
            ("User: Hi, my name is John Smith and I need a roof", "John Smith"),
            ("User: this is Maria calling back", "Maria"),
            ("User: hello there", None),
            (None, None),
        ],
    )
    def test_name_from_transcript(self, transcript, name):
        assert extract_name_from_transcript(transcript) == name

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Single family home", PropertyType.RESIDENTIAL),
            ("Office building", PropertyType.COMMERCIAL),
            ("warehouse", PropertyType.UNKNOWN),
            (None, PropertyType.UNKNOWN),
        ],
    )
    def test_property_type(self, value, expected):
        assert map_property_type(value) == expected

    def test_status_from_data(self):
        assert lead_status_from_data({"interested": True}) == LeadStatus.INTERESTED
        assert lead_status_from_data({"interested": False}) == LeadStatus.NOT_INTERESTED
        assert lead_status_from_data({"wantsCallback": True}) == LeadStatus.CALLBACK
        assert lead_status_from_data({}) == LeadStatus.NEW


class TestLeadExtractor:
    async def _record(self, session, payload, org_id, direction):
        event = WebhookEvent.from_payload(payload)
        call, is_new = await CallRecorder(session).record(event, org_id, direction)
        return event, call, is_new

    @pytest.mark.asyncio
    async def test_outbound_without_structured_data_creates_nothing(
        self, session_factory, session
    ):
        org = await create_organization(session_factory)
        event, call, is_new = await self._record(
            session, vapi_payload("c1", status="in-progress"), org.id, CallDirection.OUTBOUND
        )

        outcome = await LeadExtractor(session).extract(
            event, call, org.id, CallDirection.OUTBOUND, is_new
        )

        assert outcome.lead_id is None

    @pytest.mark.asyncio
    async def test_second_call_updates_same_lead(self, session_factory, session):
        org = await create_organization(session_factory)
        extractor = LeadExtractor(session)

        event, call, is_new = await self._record(
            session, vapi_payload("c1", direction="inbound"), org.id, CallDirection.INBOUND
        )
        first = await extractor.extract(event, call, org.id, CallDirection.INBOUND, is_new)

        payload = vapi_payload(
            "c2",
            event_type="end-of-call-report",
            direction="inbound",
            analysis={"structuredData": {"interested": True, "serviceType": "solar"}},
        )
        event, call, is_new = await self._record(session, payload, org.id, CallDirection.INBOUND)
        second = await extractor.extract(event, call, org.id, CallDirection.INBOUND, is_new)

        assert first.created is True
        assert second.created is False
        assert second.lead_id == first.lead_id
        assert second.status_changed is True
        assert second.stored_status == "interested"

        leads = (await session.execute(select(Lead))).scalars().all()
        assert len(leads) == 1
        assert leads[0].phone == CUSTOMER_PHONE
        assert leads[0].service_type == "solar"

    @pytest.mark.asyncio
    async def test_appointment_books_lead(self, session_factory, session):
        org = await create_organization(session_factory)
        payload = vapi_payload(
            "c1",
            event_type="end-of-call-report",
            direction="inbound",
            analysis={
                "structuredData": {
                    "name": "Jane Doe",
                    "interested": True,
                    "appointment": "2026-03-10T14:00:00Z",
                }
            },
        )
        event, call, is_new = await self._record(session, payload, org.id, CallDirection.INBOUND)
        extractor = LeadExtractor(session)

        outcome = await extractor.extract(event, call, org.id, CallDirection.INBOUND, is_new)
        again = await extractor.extract(event, call, org.id, CallDirection.INBOUND, False)

        assert outcome.stored_status == "booked"
        assert outcome.lead_status == "interested"
        assert outcome.has_appointment is True
        assert again.appointment_id == outcome.appointment_id
        appointments = (await session.execute(select(Appointment))).scalars().all()
        assert len(appointments) == 1
        assert appointments[0].title == "Estimate for Jane Doe"

    @pytest.mark.asyncio
    async def test_campaign_contact_outcome(self, session_factory, session):
        org = await create_organization(session_factory)
        contact = CampaignContact(
            organization_id=org.id, campaign_id="camp-1", phone=CUSTOMER_PHONE
        )
        session.add(contact)
        await session.flush()
        payload = vapi_payload(
            "c1",
            event_type="end-of-call-report",
            metadata={"campaignContactId": contact.id, "campaignId": "camp-1"},
            analysis={"structuredData": {"wantsCallback": True}},
        )
        event, call, is_new = await self._record(session, payload, org.id, CallDirection.OUTBOUND)
        extractor = LeadExtractor(session)

        outcome = await extractor.extract(event, call, org.id, CallDirection.OUTBOUND, is_new)
        await extractor.update_campaign_contact(event, call, org.id, outcome)

        await session.refresh(contact)
        assert contact.status == "callback"
        assert contact.converted_lead_id == outcome.lead_id
        lead = (await session.execute(select(Lead))).scalar_one()
        assert lead.source == "campaign"

    @pytest.mark.asyncio
    async def test_links_lead_to_call(self, session_factory, session):
        org = await create_organization(session_factory)
        event, call, is_new = await self._record(
            session, vapi_payload("c1", direction="inbound"), org.id, CallDirection.INBOUND
        )

        outcome = await LeadExtractor(session).extract(
            event, call, org.id, CallDirection.INBOUND, is_new
        )

        stored = await CallRepository(session).get_by_provider_call_id("c1", refresh=True)
        assert stored.lead_id == outcome.lead_id
