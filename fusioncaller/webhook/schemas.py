"""
Pydantic schemas for provider webhooks.

Vapi delivers either an envelope (``{"message": {...}}``) or a flat payload,
and the same field can sit in several places depending on the event type.
``WebhookEvent.from_payload`` flattens all of that into one shape.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fusioncaller.webhook.constants import (
    INTERMEDIATE_STATUSES,
    NO_ANSWER_ENDED_REASONS,
    TERMINAL_STATUSES,
    VOICEMAIL_ENDED_REASONS,
    CallDirection,
    WebhookEventType,
)

# call.type values and loose direction words sent by the provider
_DIRECTION_TYPES = {
    "inboundphonecall": CallDirection.INBOUND,
    "outboundphonecall": CallDirection.OUTBOUND,
    "inbound": CallDirection.INBOUND,
    "outbound": CallDirection.OUTBOUND,
}

# Keys that mark a mapping as lead data rather than generic analysis
_LEAD_KEYS = frozenset(
    {
        "name",
        "phone",
        "email",
        "address",
        "interested",
        "wantsCallback",
        "appointment",
        "appointmentTime",
        "scheduledTime",
        "serviceType",
        "service_type",
        "propertyType",
        "property_type",
    }
)


def _as_dict(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _first(*values: Any) -> Any:
    """First value that is not None or an empty string."""
    for value in values:
        if value is not None and value != "":
            return value
    return None


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        # Epoch milliseconds
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def _parse_duration(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(round(float(value)))
    except (TypeError, ValueError):
        return None


class WebhookEvent(BaseModel):
    """Normalized provider webhook event."""

    event_type: str | None = None
    provider_call_id: str | None = None
    assistant_id: str | None = None
    phone_number_id: str | None = None
    from_number: str | None = None
    to_number: str | None = None
    direction: CallDirection = CallDirection.UNKNOWN
    raw_status: str | None = None
    ended_reason: str | None = None
    duration_seconds: int | None = None
    recording_url: str | None = None
    transcript: str | None = None
    summary: str | None = None
    structured_data: dict[str, Any] | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    raw_payload: dict[str, Any] = Field(default_factory=dict)

    @property
    def organization_id_hint(self) -> str | None:
        value = self.metadata.get("organizationId")
        return str(value) if value else None

    @property
    def campaign_contact_id(self) -> str | None:
        value = self.metadata.get("campaignContactId")
        return str(value) if value else None

    @property
    def is_intermediate(self) -> bool:
        return self.raw_status in INTERMEDIATE_STATUSES

    @property
    def is_terminal(self) -> bool:
        # endedReason rewrites the status to voicemail or no-answer, and only
        # arrives once the call is over
        return (
            self.event_type == WebhookEventType.END_OF_CALL_REPORT.value
            or self.ended_reason is not None
            or self.raw_status in TERMINAL_STATUSES
        )

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "WebhookEvent":
        """
        Build an event from a raw webhook body.

        Precedence for every field: the ``message`` object, then the nested
        ``call`` object, then top-level keys.

        Args:
            payload: Decoded JSON body

        Returns:
            WebhookEvent: Normalized event
        """
        payload = _as_dict(payload)
        message = _as_dict(payload.get("message"))
        top = {k: v for k, v in payload.items() if k != "message"}
        call = _as_dict(message.get("call")) or _as_dict(top.get("call"))

        if message:
            merged = {**top, **call, **message}
        else:
            merged = {**call, **top}

        customer = _as_dict(merged.get("customer"))
        phone_number = _as_dict(merged.get("phoneNumber"))
        assistant = _as_dict(merged.get("assistant"))
        artifact = _as_dict(merged.get("artifact"))
        analysis = _as_dict(merged.get("analysis"))
        conversation = _as_dict(merged.get("conversation"))
        recording = _as_dict(merged.get("recording"))

        event_type = _first(message.get("type"), top.get("type"))
        direction = cls._resolve_direction(merged, call)
        if isinstance(event_type, str) and event_type.lower() in _DIRECTION_TYPES:
            # Flat payloads reuse "type" for the call type
            event_type = None

        from_number = _first(merged.get("from"), _as_dict(merged.get("caller")).get("number"))
        to_number = _first(merged.get("to"), _as_dict(merged.get("callee")).get("number"))
        if direction == CallDirection.OUTBOUND:
            from_number = _first(from_number, phone_number.get("number"))
            to_number = _first(to_number, customer.get("number"))
        else:
            from_number = _first(from_number, customer.get("number"))
            to_number = _first(to_number, phone_number.get("number"))

        ended_reason = _first(merged.get("endedReason"))
        raw_status = cls._resolve_status(merged, event_type, ended_reason)

        transcript = _first(
            merged.get("transcript") if isinstance(merged.get("transcript"), str) else None,
            artifact.get("transcript"),
            conversation.get("transcript"),
        )

        return cls(
            event_type=event_type,
            provider_call_id=_str_or_none(_first(merged.get("callId"), merged.get("id"), call.get("id"))),
            assistant_id=_str_or_none(
                _first(
                    merged.get("assistantId"),
                    merged.get("assistant_id"),
                    assistant.get("id"),
                    call.get("assistantId"),
                )
            ),
            phone_number_id=_str_or_none(
                _first(merged.get("phoneNumberId"), phone_number.get("id"), call.get("phoneNumberId"))
            ),
            from_number=_str_or_none(from_number),
            to_number=_str_or_none(to_number),
            direction=direction,
            raw_status=raw_status,
            ended_reason=_str_or_none(ended_reason),
            duration_seconds=_parse_duration(
                _first(merged.get("durationSeconds"), merged.get("duration"))
            ),
            recording_url=_str_or_none(
                _first(
                    merged.get("recordingUrl"),
                    recording.get("url"),
                    artifact.get("recordingUrl"),
                )
            ),
            transcript=_str_or_none(transcript),
            summary=_str_or_none(
                _first(merged.get("summary"), analysis.get("summary"), conversation.get("summary"))
            ),
            structured_data=cls._resolve_structured_data(merged, analysis),
            metadata=cls._resolve_metadata(merged, call),
            timestamp=_first(
                _parse_timestamp(merged.get("timestamp")),
                _parse_timestamp(merged.get("startedAt")),
                _parse_timestamp(merged.get("createdAt")),
            )
            or datetime.now(UTC),
            raw_payload=payload,
        )

    @staticmethod
    def _resolve_direction(merged: dict[str, Any], call: dict[str, Any]) -> CallDirection:
        explicit = merged.get("direction")
        if isinstance(explicit, str) and explicit.lower() in ("inbound", "outbound"):
            return CallDirection(explicit.lower())

        for value in (call.get("type"), merged.get("type")):
            if isinstance(value, str) and value.lower() in _DIRECTION_TYPES:
                return _DIRECTION_TYPES[value.lower()]

        return CallDirection.UNKNOWN

    @staticmethod
    def _resolve_status(
        merged: dict[str, Any], event_type: str | None, ended_reason: str | None
    ) -> str | None:
        status = _first(merged.get("status"), merged.get("state"))
        status = status.lower() if isinstance(status, str) else None

        if event_type == WebhookEventType.END_OF_CALL_REPORT.value:
            status = "ended"

        if isinstance(ended_reason, str):
            reason = ended_reason.lower()
            if reason in VOICEMAIL_ENDED_REASONS:
                status = "voicemail"
            elif reason in NO_ANSWER_ENDED_REASONS:
                status = "no-answer"

        return status

    @staticmethod
    def _resolve_structured_data(
        merged: dict[str, Any], analysis: dict[str, Any]
    ) -> dict[str, Any] | None:
        for candidate in (
            merged.get("lead"),
            merged.get("structuredOutput"),
            analysis.get("structuredData"),
            analysis,
        ):
            data = _as_dict(candidate)
            if data and _LEAD_KEYS.intersection(data):
                return data
        return None

    @staticmethod
    def _resolve_metadata(merged: dict[str, Any], call: dict[str, Any]) -> dict[str, Any]:
        overrides = _as_dict(merged.get("assistantOverrides")) or _as_dict(
            call.get("assistantOverrides")
        )
        for candidate in (merged.get("metadata"), call.get("metadata"), overrides.get("metadata")):
            data = _as_dict(candidate)
            if data:
                return data
        return {}


def _str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


class WebhookSuccessResponse(BaseModel):
    """Body returned when an event was processed."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    call_id: str | None = Field(None, alias="callId")
    reason: str | None = None


class WebhookErrorResponse(BaseModel):
    """Body returned when the organization is blocked or missing."""

    error: str
    action: str = "reject"
    message: str


class AccessCheckResponse(BaseModel):
    """Body returned by the pre-call access check."""

    allowed: bool
    reason: str | None = None
    message: str | None = None
