"""
Unit tests for CallRepository.

Runs against SQLite so the insert-or-update statement is exercised for real.
"""

import pytest

from fusioncaller.db.calls.repository import CallRepository


@pytest.fixture
def repository(session):
    return CallRepository(session)


@pytest.mark.asyncio
async def test_upsert_creates_then_updates_same_row(repository):
    call, created = await repository.upsert_call("vapi-1", status="ringing", direction="outbound")
    again, created_again = await repository.upsert_call(
        "vapi-1", status="completed", direction="outbound"
    )

    assert created is True
    assert created_again is False
    assert again.id == call.id
    assert again.status == "completed"


@pytest.mark.asyncio
async def test_upsert_keeps_content_when_later_event_omits_it(repository):
    await repository.upsert_call(
        "vapi-2",
        status="completed",
        transcript="Hi, my name is Jane",
        summary="Wants a quote",
        duration_seconds=120,
    )
    call, _ = await repository.upsert_call("vapi-2", status="completed", summary="Updated")

    assert call.transcript == "Hi, my name is Jane"
    assert call.duration_seconds == 120
    assert call.summary == "Updated"


@pytest.mark.asyncio
async def test_known_direction_is_never_replaced_by_unknown(repository):
    await repository.upsert_call("vapi-3", status="answered", direction="inbound")
    call, _ = await repository.upsert_call("vapi-3", status="completed", direction="unknown")

    assert call.direction == "inbound"


@pytest.mark.asyncio
async def test_unknown_direction_is_upgraded(repository):
    await repository.upsert_call("vapi-4", status="queued")
    call, _ = await repository.upsert_call("vapi-4", status="answered", direction="outbound")

    assert call.direction == "outbound"


@pytest.mark.asyncio
async def test_claim_billing_succeeds_once(repository):
    call, _ = await repository.upsert_call("vapi-5", status="completed", direction="outbound")

    assert await repository.claim_billing(call.id) is True
    assert await repository.claim_billing(call.id) is False


@pytest.mark.asyncio
async def test_link_lead(repository):
    call, _ = await repository.upsert_call("vapi-6", status="completed", organization_id="org-1")
    await repository.link_lead(call.id, "lead-1")

    stored = await repository.get_by_provider_call_id("vapi-6", refresh=True)

    assert stored.lead_id == "lead-1"
