"""
Repository for agent configuration lookups.
"""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fusioncaller.db.agent_configs.model import AgentConfig


class AgentConfigRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        organization_id: str,
        inbound_agent_id: str | None = None,
        outbound_agent_id: str | None = None,
    ) -> AgentConfig:
        config = AgentConfig(
            organization_id=organization_id,
            inbound_agent_id=inbound_agent_id,
            outbound_agent_id=outbound_agent_id,
        )
        self.session.add(config)
        await self.session.flush()
        await self.session.refresh(config)
        return config

    async def find_by_assistant_id(
        self, assistant_id: str
    ) -> tuple[str, str] | None:
        """
        Find the organization and direction configured for an assistant.

        Args:
            assistant_id: Provider assistant ID

        Returns:
            (organization_id, direction) or None if no agent matches
        """
        result = await self.session.execute(
            select(
                AgentConfig.organization_id,
                AgentConfig.inbound_agent_id,
                AgentConfig.outbound_agent_id,
            )
            .where(
                or_(
                    AgentConfig.inbound_agent_id == assistant_id,
                    AgentConfig.outbound_agent_id == assistant_id,
                )
            )
            .limit(1)
        )
        row = result.first()
        if row is None:
            return None
        return self._as_match(row.organization_id, row.inbound_agent_id, assistant_id)

    async def find_by_assistant_id_full(
        self, assistant_id: str
    ) -> tuple[str, str] | None:
        """Same as find_by_assistant_id, loading full rows."""
        result = await self.session.execute(select(AgentConfig))
        for config in result.scalars().all():
            if assistant_id in (config.inbound_agent_id, config.outbound_agent_id):
                return self._as_match(
                    config.organization_id, config.inbound_agent_id, assistant_id
                )
        return None

    @staticmethod
    def _as_match(
        organization_id: str, inbound_agent_id: str | None, assistant_id: str
    ) -> tuple[str, str]:
        direction = "inbound" if inbound_agent_id == assistant_id else "outbound"
        return organization_id, direction
