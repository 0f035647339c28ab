"""Request schemas for admin endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from fusioncaller.db.organizations.schemas import PlanName


class PlanGrantRequest(BaseModel):
    plan: PlanName
    expires_at: datetime | None = Field(None, description="No expiry when omitted")
    notes: str | None = None
    granted_by: str | None = None


class PrivilegesRequest(BaseModel):
    """Privilege flags merged into the organization's existing ones."""

    model_config = ConfigDict(extra="forbid")

    bypass_limits: bool | None = None
    unlimited_calls: bool | None = None
    notes: str | None = None
    granted_by: str | None = None

    def flags(self) -> dict[str, bool]:
        return self.model_dump(
            exclude_none=True, include={"bypass_limits", "unlimited_calls"}
        )


class TrialExtendRequest(BaseModel):
    additional_days: int = Field(..., gt=0, le=365)
