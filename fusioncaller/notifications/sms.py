"""
Lead notification SMS: message templates and sending rules.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel

from fusioncaller.db.organizations.model import Organization
from fusioncaller.exceptions import NotificationError
from fusioncaller.notifications.client import TwilioSMSClient
from fusioncaller.utils.logger import logger

DEFAULT_TIMEZONE = "America/New_York"


class NotificationType(str, Enum):
    INBOUND_NEW_LEAD = "inbound_new_lead"
    INBOUND_INTERESTED = "inbound_interested"
    INBOUND_BOOKED = "inbound_booked"
    OUTBOUND_INTERESTED = "outbound_interested"
    OUTBOUND_CALLBACK = "outbound_callback"


class LeadData(BaseModel):
    """Lead fields used in notification messages."""

    phone: str = ""
    name: str | None = None
    business_name: str | None = None
    service_type: str | None = None
    property_type: str | None = None
    address: str | None = None
    notes: str | None = None


def _suffix(value: str | None, sep: str = " | ") -> str:
    return f"{sep}{value}" if value else ""


SMS_TEMPLATES: dict[NotificationType, Callable[[LeadData], str]] = {
    NotificationType.INBOUND_NEW_LEAD: lambda d: (
        f"🔔 NEW LEAD: {d.name or 'Unknown'} called about {d.service_type or 'services'}. "
        f"Phone: {d.phone}{_suffix(d.address)}"
    ),
    NotificationType.INBOUND_INTERESTED: lambda d: (
        f"🔥 HOT LEAD: {d.name or 'Unknown'} is interested in "
        f"{d.service_type or 'your services'}! "
        f"{f'({d.property_type}) ' if d.property_type else ''}Phone: {d.phone}"
    ),
    NotificationType.INBOUND_BOOKED: lambda d: (
        f"📅 BOOKED: {d.name or 'Unknown'} scheduled an estimate. "
        f"Phone: {d.phone}{_suffix(d.address)}"
    ),
    NotificationType.OUTBOUND_INTERESTED: lambda d: (
        f"✅ INTERESTED: {d.business_name or d.name or 'Contact'} wants to learn more! "
        f"{f'Notes: {d.notes} ' if d.notes else ''}Phone: {d.phone}"
    ),
    NotificationType.OUTBOUND_CALLBACK: lambda d: (
        f"📞 CALLBACK: {d.business_name or d.name or 'Contact'} requested a callback. "
        f"Phone: {d.phone}{_suffix(d.notes)}"
    ),
}

# Preference flag that enables each notification type
_PREFERENCE_FLAGS: dict[NotificationType, tuple[str, ...]] = {
    NotificationType.INBOUND_NEW_LEAD: ("notifyOnInbound",),
    NotificationType.INBOUND_INTERESTED: ("notifyOnInbound",),
    NotificationType.INBOUND_BOOKED: ("notifyOnInbound", "notifyOnBooked"),
    NotificationType.OUTBOUND_INTERESTED: ("notifyOnInterestedOutbound",),
    NotificationType.OUTBOUND_CALLBACK: ("notifyOnCallback",),
}


def determine_notification_type(
    direction: str, lead_status: str, has_appointment: bool = False
) -> NotificationType | None:
    """
    Pick the notification for a finished call.

    Args:
        direction: inbound or outbound
        lead_status: Lead status derived from the call
        has_appointment: Whether an appointment was booked

    Returns:
        NotificationType or None when nothing should be sent
    """
    if direction == "inbound":
        if has_appointment:
            return NotificationType.INBOUND_BOOKED
        if lead_status == "interested":
            return NotificationType.INBOUND_INTERESTED
        return NotificationType.INBOUND_NEW_LEAD

    if direction == "outbound":
        if lead_status == "interested":
            return NotificationType.OUTBOUND_INTERESTED
        if lead_status == "callback":
            return NotificationType.OUTBOUND_CALLBACK

    return None


def _minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def is_quiet_hours(
    settings: dict[str, Any], timezone: str | None, now: datetime | None = None
) -> bool:
    """
    Whether quiet hours are active in the organization's timezone.

    Ranges where start > end wrap past midnight (e.g. 21:00 to 08:00).
    Malformed settings count as "not quiet".
    """
    if not settings.get("quietHoursEnabled"):
        return False

    try:
        tz = ZoneInfo(timezone or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("[Notifier] Unknown timezone, using default", timezone=timezone)
        tz = ZoneInfo(DEFAULT_TIMEZONE)

    try:
        start = _minutes(settings["quietHoursStart"])
        end = _minutes(settings["quietHoursEnd"])
    except (KeyError, ValueError, AttributeError, TypeError):
        return False

    local = (now or datetime.now(UTC)).astimezone(tz)
    current = local.hour * 60 + local.minute

    if start > end:
        return current >= start or current < end
    return start <= current < end


@dataclass
class SendResult:
    success: bool
    error: str | None = None
    message_sid: str | None = None


def render_message(notification_type: NotificationType, data: LeadData) -> str:
    return SMS_TEMPLATES[notification_type](data)


async def send_lead_notification(
    org: Organization,
    notification_type: NotificationType,
    data: LeadData,
    sms_client: TwilioSMSClient,
    now: datetime | None = None,
) -> SendResult:
    """
    Send a lead notification to the organization's notification phone.

    Requires SMS enabled, the per-type preference, no active quiet hours and
    a notification phone.

    Args:
        org: Organization to notify
        notification_type: Which template to send
        data: Lead fields for the template
        sms_client: SMS client
        now: Current time, for testing

    Returns:
        SendResult: Whether the SMS was sent, or why not
    """
    settings = org.notification_settings or {}

    if not settings.get("smsEnabled"):
        return SendResult(False, "SMS notifications disabled")

    flags = _PREFERENCE_FLAGS[notification_type]
    if not any(settings.get(flag) for flag in flags):
        return SendResult(False, "Notification type disabled")

    if is_quiet_hours(settings, org.timezone, now):
        logger.info("[Notifier] Skipping notification, quiet hours", organization_id=org.id)
        return SendResult(False, "Quiet hours active")

    if not org.notification_phone:
        return SendResult(False, "No notification phone number configured")

    try:
        sid = await sms_client.send_sms(
            org.notification_phone, render_message(notification_type, data)
        )
    except NotificationError as e:
        return SendResult(False, e.message)

    return SendResult(True, message_sid=sid)
