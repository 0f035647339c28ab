"""Pydantic schemas for call disputes."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

DisputeStatus = Literal["pending", "approved", "denied"]


class DisputeCreate(BaseModel):
    """Dispute submitted by an organization for a counted call."""

    call_id: str | None = None
    campaign_contact_id: str | None = None
    call_date: datetime
    call_duration: int | None = Field(None, ge=0)
    call_outcome: str = Field(..., min_length=1, max_length=50)
    phone_number: str | None = None
    reason: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def require_call_reference(self) -> "DisputeCreate":
        if not self.call_id and not self.campaign_contact_id:
            raise ValueError("call_id or campaign_contact_id is required")
        return self


class DisputeReview(BaseModel):
    status: Literal["approved", "denied"]
    admin_notes: str | None = None
    reviewed_by: str = Field(..., min_length=1, description="Reviewing admin")


class Dispute(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    call_id: str | None = None
    campaign_contact_id: str | None = None
    call_date: datetime
    call_duration: int | None = None
    call_outcome: str
    phone_number: str | None = None
    reason: str
    status: DisputeStatus
    admin_notes: str | None = None
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    credit_refunded: bool = False
    created_at: datetime


class DisputeList(BaseModel):
    disputes: list[Dispute]
    total: int
