"""Tests for lead notification rules and templates."""

from datetime import UTC, datetime

import pytest

from fusioncaller.db.organizations.model import Organization
from fusioncaller.exceptions import NotificationError
from fusioncaller.notifications.sms import (
    LeadData,
    NotificationType,
    determine_notification_type,
    is_quiet_hours,
    render_message,
    send_lead_notification,
)


class RecordingSMSClient:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send_sms(self, to: str, body: str) -> str:
        if self.fail:
            raise NotificationError("Twilio is down", "SMS_SEND_FAILED")
        self.sent.append((to, body))
        return "SM123"


def _org(**settings) -> Organization:
    return Organization(
        id="org-1",
        name="Acme Roofing",
        timezone="America/New_York",
        notification_phone="+14155550111",
        notification_settings={"smsEnabled": True, **settings},
    )


class TestDetermineNotificationType:
    @pytest.mark.parametrize(
        "direction,lead_status,has_appointment,expected",
        [
            ("inbound", "new", False, NotificationType.INBOUND_NEW_LEAD),
            ("inbound", "interested", False, NotificationType.INBOUND_INTERESTED),
            ("inbound", "interested", True, NotificationType.INBOUND_BOOKED),
            ("outbound", "interested", False, NotificationType.OUTBOUND_INTERESTED),
            ("outbound", "callback", False, NotificationType.OUTBOUND_CALLBACK),
            ("outbound", "not_interested", False, None),
            ("unknown", "interested", False, None),
        ],
    )
    def test_mapping(self, direction, lead_status, has_appointment, expected):
        assert determine_notification_type(direction, lead_status, has_appointment) == expected


class TestQuietHours:
    def test_disabled(self):
        assert is_quiet_hours({"quietHoursEnabled": False}, "America/New_York") is False

    def test_overnight_range(self):
        settings = {
            "quietHoursEnabled": True,
            "quietHoursStart": "21:00",
            "quietHoursEnd": "08:00",
        }
        # 23:30 and 12:00 in New York (UTC-5 in January)
        late = datetime(2026, 1, 15, 4, 30, tzinfo=UTC)
        noon = datetime(2026, 1, 15, 17, 0, tzinfo=UTC)

        assert is_quiet_hours(settings, "America/New_York", late) is True
        assert is_quiet_hours(settings, "America/New_York", noon) is False

    def test_same_day_range(self):
        settings = {
            "quietHoursEnabled": True,
            "quietHoursStart": "12:00",
            "quietHoursEnd": "14:00",
        }
        one_pm = datetime(2026, 1, 15, 18, 0, tzinfo=UTC)

        assert is_quiet_hours(settings, "America/New_York", one_pm) is True

    def test_malformed_settings_are_not_quiet(self):
        settings = {"quietHoursEnabled": True, "quietHoursStart": "late"}

        assert is_quiet_hours(settings, "America/New_York") is False

    def test_unknown_timezone_falls_back(self):
        settings = {
            "quietHoursEnabled": True,
            "quietHoursStart": "21:00",
            "quietHoursEnd": "08:00",
        }
        late = datetime(2026, 1, 15, 4, 30, tzinfo=UTC)

        assert is_quiet_hours(settings, "Mars/Olympus_Mons", late) is True


class TestTemplates:
    def test_new_lead_defaults(self):
        message = render_message(NotificationType.INBOUND_NEW_LEAD, LeadData(phone="+1415"))

        assert message == "🔔 NEW LEAD: Unknown called about services. Phone: +1415"

    def test_outbound_interested_prefers_business_name(self):
        data = LeadData(phone="+1415", name="Jane", business_name="Jane's Bakery", notes="Call Tue")

        message = render_message(NotificationType.OUTBOUND_INTERESTED, data)

        assert message == "✅ INTERESTED: Jane's Bakery wants to learn more! Notes: Call Tue Phone: +1415"

    def test_inbound_interested_includes_property_type(self):
        data = LeadData(phone="+1415", name="Jane", service_type="gutters", property_type="residential")

        message = render_message(NotificationType.INBOUND_INTERESTED, data)

        assert message == "🔥 HOT LEAD: Jane is interested in gutters! (residential) Phone: +1415"


class TestSendLeadNotification:
    @pytest.mark.asyncio
    async def test_sends_when_enabled(self):
        client = RecordingSMSClient()
        org = _org(notifyOnCallback=True)

        result = await send_lead_notification(
            org, NotificationType.OUTBOUND_CALLBACK, LeadData(phone="+1415", name="Jane"), client
        )

        assert result.success is True
        assert result.message_sid == "SM123"
        assert client.sent == [("+14155550111", "📞 CALLBACK: Jane requested a callback. Phone: +1415")]

    @pytest.mark.asyncio
    async def test_booked_accepts_either_flag(self):
        client = RecordingSMSClient()
        org = _org(notifyOnBooked=True)

        result = await send_lead_notification(
            org, NotificationType.INBOUND_BOOKED, LeadData(phone="+1415"), client
        )

        assert result.success is True

    @pytest.mark.asyncio
    async def test_preference_disabled(self):
        client = RecordingSMSClient()

        result = await send_lead_notification(
            _org(), NotificationType.OUTBOUND_INTERESTED, LeadData(phone="+1415"), client
        )

        assert result.success is False
        assert client.sent == []

    @pytest.mark.asyncio
    async def test_quiet_hours_suppress(self):
        client = RecordingSMSClient()
        org = _org(
            notifyOnInbound=True,
            quietHoursEnabled=True,
            quietHoursStart="21:00",
            quietHoursEnd="08:00",
        )

        result = await send_lead_notification(
            org,
            NotificationType.INBOUND_NEW_LEAD,
            LeadData(phone="+1415"),
            client,
            now=datetime(2026, 1, 15, 4, 30, tzinfo=UTC),
        )

        assert result.success is False
        assert result.error == "Quiet hours active"

    @pytest.mark.asyncio
    async def test_missing_phone(self):
        org = _org(notifyOnInbound=True)
        org.notification_phone = None

        result = await send_lead_notification(
            org, NotificationType.INBOUND_NEW_LEAD, LeadData(phone="+1415"), RecordingSMSClient()
        )

        assert result.success is False

    @pytest.mark.asyncio
    async def test_provider_error_is_reported(self):
        result = await send_lead_notification(
            _org(notifyOnInbound=True),
            NotificationType.INBOUND_NEW_LEAD,
            LeadData(phone="+1415"),
            RecordingSMSClient(fail=True),
        )

        assert result.success is False
        assert result.error
