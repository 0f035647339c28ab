"""
Database model for voice agent configuration.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from fusioncaller.db.database import Base


class AgentConfig(Base):
    """Maps provider assistant IDs to an organization and a call direction."""

    __tablename__ = "agent_configs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    organization_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    inbound_agent_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True, comment="Vapi assistant for inbound calls"
    )
    outbound_agent_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True, comment="Vapi assistant for outbound calls"
    )
    inbound_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    outbound_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )
