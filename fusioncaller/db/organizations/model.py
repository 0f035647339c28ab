"""
SQLAlchemy model for organizations.

Organizations are the tenant boundary: unit of billing, access control
and data isolation.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fusioncaller.db.database import Base


class Organization(Base):
    """
    Organization (tenant) model.

    Holds the plan, trial window, admin overrides and the monthly
    billable-call counter that the webhook updates.
    """

    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
        comment="Organization UUID",
    )
    name: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Organization display name"
    )
    email: Mapped[str | None] = mapped_column(
        String(255), nullable=True, comment="Billing/contact email"
    )
    timezone: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="America/New_York",
        comment="IANA timezone used for quiet hours",
    )

    # Subscription
    plan: Mapped[str | None] = mapped_column(
        String(20), nullable=True, comment="Paid plan: starter, growth, pro"
    )
    billing_customer_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, comment="Stripe customer ID"
    )

    # Trial
    trial_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    trial_ends_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    trial_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Admin overrides
    admin_granted_plan: Mapped[str | None] = mapped_column(
        String(20), nullable=True, comment="Plan granted by an admin"
    )
    admin_granted_plan_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    admin_granted_plan_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_privileges: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Privilege flags, e.g. bypass_limits, unlimited_calls",
    )
    admin_privileges_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Usage counters
    billable_calls_this_month: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    billing_period_month: Mapped[int | None] = mapped_column(Integer, nullable=True)
    billing_period_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Notifications
    notification_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notification_settings: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )

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

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name}, plan={self.plan})>"
