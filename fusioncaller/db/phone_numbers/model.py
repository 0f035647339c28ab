"""
Database model for organization phone numbers.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from fusioncaller.db.database import Base


class PhoneNumber(Base):
    """Phone number owned by an organization, used for tenant resolution."""

    __tablename__ = "phone_numbers"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    organization_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    phone_number: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True, comment="Phone number (E.164 format)"
    )
    provider_phone_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True, comment="Vapi phone number ID"
    )
    friendly_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="both", comment="inbound, outbound or both"
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )
