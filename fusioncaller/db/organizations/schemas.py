"""Pydantic schemas for organization models."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

PlanName = Literal["starter", "growth", "pro"]


class OrganizationBase(BaseModel):
    """Base organization schema."""

    name: str = Field(..., min_length=1, max_length=255, description="Organization display name")
    email: str | None = Field(None, description="Contact email")
    timezone: str | None = Field(None, description="IANA timezone name")


class OrganizationCreate(OrganizationBase):
    """Schema for creating an organization."""

    plan: PlanName | None = Field(None, description="Paid plan")
    billing_customer_id: str | None = Field(None, description="Stripe customer ID")
    notification_phone: str | None = Field(None, description="Phone for SMS alerts")
    notification_settings: dict[str, Any] | None = Field(
        None, description="SMS notification preferences"
    )


class Organization(OrganizationBase):
    """Organization schema with full details."""

    id: str = Field(..., description="Organization UUID")
    plan: str | None = None
    trial_started_at: datetime | None = None
    trial_ends_at: datetime | None = None
    trial_used: bool = False
    admin_granted_plan: str | None = None
    admin_granted_plan_expires_at: datetime | None = None
    admin_granted_plan_notes: str | None = None
    admin_privileges: dict[str, Any] = Field(default_factory=dict)
    admin_privileges_notes: str | None = None
    billable_calls_this_month: int = 0
    billing_period_month: int | None = None
    billing_period_year: int | None = None
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = {"from_attributes": True}


class TrialStatus(BaseModel):
    """Trial state of an organization."""

    is_on_trial: bool
    trial_started_at: datetime | None = None
    trial_ends_at: datetime | None = None
    days_remaining: int = 0
    is_expired: bool = False
    has_used_trial: bool = False
    can_start_trial: bool = True
