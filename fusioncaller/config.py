"""Application-wide settings."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "dev"
    STAGING = "staging"
    PRODUCTION = "prod"


class AppSettings(BaseSettings):
    """Settings for the HTTP service, read from the environment."""

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment. API docs are hidden in prod",
    )
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Dashboard origins allowed to call the API (JSON list)",
    )
    api_token: str | None = Field(
        default=None,
        description="Bearer token for the admin and organization APIs",
    )

    @property
    def docs_enabled(self) -> bool:
        return self.environment != Environment.PRODUCTION


_app_settings: AppSettings | None = None


def get_app_settings() -> AppSettings:
    global _app_settings
    if _app_settings is None:
        _app_settings = AppSettings()
    return _app_settings


def set_app_settings(settings: AppSettings) -> None:
    global _app_settings
    _app_settings = settings
