"""Pydantic schemas for usage statistics."""

from pydantic import BaseModel, Field


class BillingPeriod(BaseModel):
    month: int
    year: int


class UsageStats(BaseModel):
    """Outbound usage for the current billing period."""

    organization_id: str
    plan: str | None = Field(None, description="Effective plan (admin grant or paid)")
    billable_calls_this_month: int = 0
    monthly_limit: int = 0
    remaining_calls: int = Field(
        0, description="Allowance left, including refunded dispute credits"
    )
    pending_disputes: int = 0
    refunded_credits: int = 0
    billing_period: BillingPeriod
