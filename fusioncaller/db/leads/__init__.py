"""Lead and appointment models."""

from fusioncaller.db.leads.model import Appointment, Lead
from fusioncaller.db.leads.repository import LeadRepository

__all__ = ["Appointment", "Lead", "LeadRepository"]
