"""Campaign contact models."""

from fusioncaller.db.campaign_contacts.model import CampaignContact
from fusioncaller.db.campaign_contacts.repository import CampaignContactRepository

__all__ = ["CampaignContact", "CampaignContactRepository"]
