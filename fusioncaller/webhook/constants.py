"""Constants for call webhook processing."""

from enum import Enum


class CallStatus(str, Enum):
    """Normalized call status stored on call records."""

    QUEUED = "queued"
    RINGING = "ringing"
    ANSWERED = "answered"
    COMPLETED = "completed"
    FAILED = "failed"
    VOICEMAIL = "voicemail"


class CallDirection(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"
    UNKNOWN = "unknown"


class LeadStatus(str, Enum):
    NEW = "new"
    INTERESTED = "interested"
    NOT_INTERESTED = "not_interested"
    CALLBACK = "callback"
    BOOKED = "booked"
    CUSTOMER = "customer"


class LeadSource(str, Enum):
    INBOUND = "inbound"
    MANUAL = "manual"
    CAMPAIGN = "campaign"


class PropertyType(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    UNKNOWN = "unknown"


class WebhookEventType(str, Enum):
    STATUS_UPDATE = "status-update"
    END_OF_CALL_REPORT = "end-of-call-report"


# Raw provider status -> stored status. Anything not listed maps to COMPLETED.
PROVIDER_STATUS_MAP: dict[str, CallStatus] = {
    "queued": CallStatus.QUEUED,
    "ringing": CallStatus.RINGING,
    "in-progress": CallStatus.ANSWERED,
    "forwarding": CallStatus.ANSWERED,
    "answered": CallStatus.ANSWERED,
    "ended": CallStatus.COMPLETED,
    "completed": CallStatus.COMPLETED,
    "busy": CallStatus.FAILED,
    "no-answer": CallStatus.FAILED,
    "canceled": CallStatus.FAILED,
    "failed": CallStatus.FAILED,
    "voicemail": CallStatus.VOICEMAIL,
}

# Access checks are skipped only for these raw statuses
INTERMEDIATE_STATUSES = frozenset({"queued", "ringing"})

# Raw statuses that mark the end of a call
TERMINAL_STATUSES = frozenset({"ended", "completed"})

BILLABLE_OUTCOMES = frozenset(
    {"answered", "interested", "not_interested", "callback", "completed"}
)
NON_BILLABLE_OUTCOMES = frozenset(
    {
        "voicemail",
        "no_answer",
        "wrong_number",
        "failed",
        "queued",
        "pending",
        "calling",
        "ringing",
    }
)

# endedReason values that override the raw status
VOICEMAIL_ENDED_REASONS = frozenset({"voicemail", "customer-did-not-answer-voicemail"})
NO_ANSWER_ENDED_REASONS = frozenset(
    {"customer-did-not-answer", "customer-busy", "customer-did-not-answer-busy"}
)

UNIDENTIFIED_ORG_REASON = "unidentified_org_fail_open"
