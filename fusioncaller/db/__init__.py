"""Database layer for PostgreSQL operations.

Importing this package registers every model on ``Base.metadata``.
"""

from fusioncaller.db.agent_configs import AgentConfig, AgentConfigRepository
from fusioncaller.db.calls import Call, CallRepository
from fusioncaller.db.campaign_contacts import CampaignContact, CampaignContactRepository
from fusioncaller.db.config import DatabaseSettings, get_db_settings
from fusioncaller.db.database import Base, get_db
from fusioncaller.db.disputes import CallDispute, DisputeRepository
from fusioncaller.db.leads import Appointment, Lead, LeadRepository
from fusioncaller.db.organizations import Organization, OrganizationRepository
from fusioncaller.db.phone_numbers import PhoneNumber, PhoneNumberRepository
from fusioncaller.db.workflows import Workflow, WorkflowExecution, WorkflowRepository

__all__ = [
    "AgentConfig",
    "AgentConfigRepository",
    "Appointment",
    "Base",
    "Call",
    "CallDispute",
    "CallRepository",
    "CampaignContact",
    "CampaignContactRepository",
    "DatabaseSettings",
    "DisputeRepository",
    "Lead",
    "LeadRepository",
    "Organization",
    "OrganizationRepository",
    "PhoneNumber",
    "PhoneNumberRepository",
    "Workflow",
    "WorkflowExecution",
    "WorkflowRepository",
    "get_db",
    "get_db_settings",
]
