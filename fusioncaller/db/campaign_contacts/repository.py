"""
Repository for campaign contact updates.
"""

from datetime import UTC, datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.campaign_contacts.model import CampaignContact


class CampaignContactRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def record_call_outcome(
        self,
        contact_id: str,
        organization_id: str,
        status: str,
        outcome: str,
        duration_seconds: int | None,
        summary: str | None,
        converted_lead_id: str | None = None,
    ) -> bool:
        """
        Store the outcome of a call to a campaign contact.

        ``call_count`` is incremented in the UPDATE itself. The contact must
        belong to ``organization_id``.

        Args:
            contact_id: Campaign contact UUID
            organization_id: Organization the call was attributed to
            status: Contact status derived from the call
            outcome: Stored call status
            duration_seconds: Call duration
            summary: Call summary
            converted_lead_id: Lead produced by the call, if any

        Returns:
            bool: True if a contact was updated
        """
        values = {
            "status": status,
            "call_count": CampaignContact.call_count + 1,
            "last_call_at": datetime.now(UTC),
            "last_call_outcome": outcome,
            "last_call_duration": duration_seconds,
            "last_call_summary": summary,
        }
        if converted_lead_id:
            values["converted_lead_id"] = converted_lead_id

        result = await self.session.execute(
            update(CampaignContact)
            .where(CampaignContact.id == contact_id)
            .where(CampaignContact.organization_id == organization_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
