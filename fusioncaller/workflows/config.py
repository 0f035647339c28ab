"""Configuration for workflow automations."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkflowSettings(BaseSettings):
    """Settings for workflow actions.

    Attributes:
        webhook_timeout: Timeout in seconds for outgoing webhook actions
        enabled: Run workflows on call and lead events
    """

    model_config = SettingsConfigDict(
        env_prefix="WORKFLOWS_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    webhook_timeout: float = Field(
        default=10.0, description="Timeout in seconds for outgoing webhook actions"
    )
    enabled: bool = Field(
        default=True, description="Run workflows on call and lead events"
    )


@lru_cache
def get_workflow_settings() -> WorkflowSettings:
    """Get cached workflow settings.

    Returns:
        WorkflowSettings: Cached settings instance
    """
    return WorkflowSettings()
