"""Agent configuration models."""

from fusioncaller.db.agent_configs.model import AgentConfig
from fusioncaller.db.agent_configs.repository import AgentConfigRepository

__all__ = ["AgentConfig", "AgentConfigRepository"]
