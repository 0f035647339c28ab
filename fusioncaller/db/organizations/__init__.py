"""Organization database models."""

from fusioncaller.db.organizations.model import Organization
from fusioncaller.db.organizations.repository import OrganizationRepository
from fusioncaller.db.organizations.schemas import (
    Organization as OrganizationSchema,
)
from fusioncaller.db.organizations.schemas import OrganizationCreate, TrialStatus

__all__ = [
    "Organization",
    "OrganizationRepository",
    "OrganizationSchema",
    "OrganizationCreate",
    "TrialStatus",
]
