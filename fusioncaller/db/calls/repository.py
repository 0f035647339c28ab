"""
Repository for call database operations.

Calls are written with an insert-or-update keyed on ``provider_call_id`` so
that repeated or reordered webhook deliveries collapse onto one row.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import case, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.calls.model import Call
from fusioncaller.utils.logger import logger

# Kept from the stored row when a later event omits them
_CONTENT_FIELDS = (
    "organization_id",
    "lead_id",
    "from_number",
    "to_number",
    "duration_seconds",
    "recording_url",
    "transcript",
    "summary",
)


class CallRepository:
    """Repository for managing call records in the database."""

    def __init__(self, session: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(Call)
        if dialect == "sqlite":
            return sqlite.insert(Call)
        raise NotImplementedError(f"Upsert not supported for dialect {dialect}")

    async def upsert_call(
        self,
        provider_call_id: str,
        status: str,
        direction: str = "unknown",
        organization_id: str | None = None,
        from_number: str | None = None,
        to_number: str | None = None,
        duration_seconds: int | None = None,
        recording_url: str | None = None,
        transcript: str | None = None,
        summary: str | None = None,
        raw_payload: dict[str, Any] | None = None,
    ) -> tuple[Call, bool]:
        """
        Insert a call or update the existing row with the same provider ID.

        ``status`` always takes the new value. Content fields keep the stored
        value when the new one is None. A known direction replaces "unknown".

        Args:
            provider_call_id: Deduplication key
            status: Normalized call status
            direction: inbound, outbound or unknown
            organization_id: Owning organization (None when unattributed)
            from_number: Caller number
            to_number: Callee number
            duration_seconds: Call duration
            recording_url: Recording URL
            transcript: Transcript text
            summary: Call summary
            raw_payload: Raw webhook payload

        Returns:
            tuple[Call, bool]: The stored call and whether this created the row
        """
        existing = await self.session.execute(
            select(Call.id).where(Call.provider_call_id == provider_call_id)
        )
        is_new = existing.scalar_one_or_none() is None

        now = datetime.now(UTC)
        stmt = self._insert().values(
            id=str(uuid4()),
            provider_call_id=provider_call_id,
            status=status,
            direction=direction,
            organization_id=organization_id,
            from_number=from_number,
            to_number=to_number,
            duration_seconds=duration_seconds,
            recording_url=recording_url,
            transcript=transcript,
            summary=summary,
            raw_payload=raw_payload,
            created_at=now,
            updated_at=now,
        )
        excluded = stmt.excluded
        set_: dict[str, Any] = {
            "status": excluded.status,
            "raw_payload": excluded.raw_payload,
            "updated_at": excluded.updated_at,
            "direction": case(
                (excluded.direction == "unknown", Call.direction),
                else_=excluded.direction,
            ),
        }
        for field in _CONTENT_FIELDS:
            set_[field] = func.coalesce(excluded[field], getattr(Call, field))

        stmt = stmt.on_conflict_do_update(index_elements=["provider_call_id"], set_=set_)
        await self.session.execute(stmt)

        call = await self.get_by_provider_call_id(provider_call_id, refresh=True)

        logger.info(
            f"[CallRepository] {'Created' if is_new else 'Updated'} call record",
            call_id=call.id,
            provider_call_id=provider_call_id,
            status=status,
        )
        return call, is_new

    async def get_by_provider_call_id(
        self, provider_call_id: str, refresh: bool = False
    ) -> Call | None:
        """
        Get a call by its provider call ID.

        Args:
            provider_call_id: Provider (or synthesized) call ID
            refresh: Overwrite any copy already loaded in the session

        Returns:
            Call | None: Call record if found, None otherwise
        """
        stmt = select(Call).where(Call.provider_call_id == provider_call_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def link_lead(self, call_id: str, lead_id: str) -> None:
        await self.session.execute(
            update(Call).where(Call.id == call_id).values(lead_id=lead_id)
        )

    async def claim_billing(self, call_id: str) -> bool:
        """
        Mark a call as billed, once.

        The conditional update only matches while ``billed_at`` is NULL, so
        concurrent deliveries for the same call cannot both claim it.

        Args:
            call_id: Call record ID

        Returns:
            bool: True if this caller claimed the call
        """
        result = await self.session.execute(
            update(Call)
            .where(Call.id == call_id)
            .where(Call.billed_at.is_(None))
            .values(billed_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
