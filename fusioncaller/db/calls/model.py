"""
SQLAlchemy model for call records.

One row per logical telephone call. Rows are created by the first webhook
event for a call and updated by every later event for the same call.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fusioncaller.db.database import Base


class Call(Base):
    """
    Call record model.

    ``provider_call_id`` is the deduplication key: the provider's call ID, or
    a synthesized ``synth_`` ID when the provider did not send one.
    ``organization_id`` is NULL for calls that could not be attributed.
    """

    __tablename__ = "calls"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    organization_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        comment="Owning organization, NULL when unattributed",
    )
    lead_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("leads.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Call identification
    provider_call_id: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, comment="Provider call ID"
    )
    direction: Mapped[str] = mapped_column(
        String(20), nullable=False, default="unknown", comment="inbound, outbound or unknown"
    )
    from_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    to_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True, comment="Normalized call status"
    )

    # Call content
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    recording_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    transcript: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    raw_payload: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True, comment="Last raw webhook payload"
    )

    billed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the call was counted toward the monthly usage",
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        comment="Record creation timestamp",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        comment="Record last update timestamp",
    )

    __table_args__ = (
        # Organization call history
        Index("idx_calls_org_created", "organization_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Call(id={self.id}, provider_call_id={self.provider_call_id}, "
            f"organization_id={self.organization_id}, status={self.status})>"
        )
