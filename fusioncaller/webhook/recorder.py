"""
Writes webhook events to call records.
"""

import hashlib
from datetime import UTC

from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.calls.model import Call
from fusioncaller.db.calls.repository import CallRepository
from fusioncaller.webhook.constants import PROVIDER_STATUS_MAP, CallDirection, CallStatus
from fusioncaller.webhook.schemas import WebhookEvent

SYNTHETIC_ID_PREFIX = "synth_"


def map_call_status(raw_status: str | None) -> CallStatus:
    """Map a provider status to the stored vocabulary. Unknown maps to completed."""
    if not raw_status:
        return CallStatus.COMPLETED
    return PROVIDER_STATUS_MAP.get(raw_status.lower(), CallStatus.COMPLETED)


def synthesize_call_id(event: WebhookEvent, direction: CallDirection) -> str:
    """
    Build a stable ID for events that carry no provider call ID.

    Events for the same numbers and direction within the same UTC minute
    collapse to one ID.
    """
    bucket = event.timestamp.astimezone(UTC).strftime("%Y-%m-%dT%H:%M")
    key = "|".join(
        [event.from_number or "", event.to_number or "", direction.value, bucket]
    )
    return SYNTHETIC_ID_PREFIX + hashlib.sha1(key.encode()).hexdigest()[:24]


class CallRecorder:
    """Idempotent call writes keyed on the provider call ID."""

    def __init__(self, session: AsyncSession):
        self.calls = CallRepository(session)

    def dedup_key(self, event: WebhookEvent, direction: CallDirection) -> str:
        return event.provider_call_id or synthesize_call_id(event, direction)

    async def record(
        self,
        event: WebhookEvent,
        organization_id: str | None,
        direction: CallDirection,
    ) -> tuple[Call, bool]:
        """
        Insert or update the call for an event.

        Args:
            event: Normalized webhook event
            organization_id: Owning organization, None when unattributed
            direction: Resolved call direction

        Returns:
            tuple[Call, bool]: The call and whether it was created
        """
        return await self.calls.upsert_call(
            provider_call_id=self.dedup_key(event, direction),
            status=map_call_status(event.raw_status).value,
            direction=direction.value,
            organization_id=organization_id,
            from_number=event.from_number,
            to_number=event.to_number,
            duration_seconds=event.duration_seconds,
            recording_url=event.recording_url,
            transcript=event.transcript,
            summary=event.summary,
            raw_payload=event.raw_payload,
        )

    async def record_blocked(
        self,
        event: WebhookEvent,
        organization_id: str | None,
        direction: CallDirection,
        reason: str,
    ) -> Call:
        """Record a call rejected by the access check as failed."""
        call, _ = await self.calls.upsert_call(
            provider_call_id=self.dedup_key(event, direction),
            status=CallStatus.FAILED.value,
            direction=direction.value,
            organization_id=organization_id,
            from_number=event.from_number,
            to_number=event.to_number,
            duration_seconds=event.duration_seconds,
            summary=f"Call blocked: {reason}",
            raw_payload=event.raw_payload,
        )
        return call
