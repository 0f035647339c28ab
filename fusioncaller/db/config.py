"""
Database connection settings.

Connections are built from the ``DB_*`` parts, or taken verbatim from
``DB_URL`` when it is set (local SQLite, managed connection strings).
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

from fusioncaller.utils.logger import logger


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection and pool settings."""

    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_prefix="DB_"
    )

    url: str | None = Field(
        default=None, description="Full async SQLAlchemy URL; overrides the parts below"
    )
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="fusioncaller", description="Database name")
    username: str = Field(default="postgres", description="Database username")
    password: str = Field(default="", description="Database user password")
    ssl: bool = Field(default=True, description="Require SSL for connections")

    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum overflow connections")
    echo: bool = Field(default=False, description="Echo SQL statements to logs")

    def _url(self, driver: str, ssl_query: dict[str, str]) -> URL:
        return URL.create(
            drivername=driver,
            username=self.username,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.name,
            query=ssl_query if self.ssl else {},
        )

    @property
    def is_postgres(self) -> bool:
        return make_url(self.get_async_url()).get_backend_name() == "postgresql"

    def get_async_url(self) -> str:
        """URL for the application engine (asyncpg unless ``DB_URL`` says otherwise)."""
        if self.url:
            return self.url
        url = self._url("postgresql+asyncpg", {"ssl": "require"})
        return url.render_as_string(hide_password=False)

    def get_sync_url(self) -> str:
        """URL for Alembic, which runs on a synchronous driver."""
        if self.url:
            url = make_url(self.url)
            sync_drivers = {"postgresql": "postgresql+psycopg2", "sqlite": "sqlite"}
            url = url.set(drivername=sync_drivers.get(url.get_backend_name(), url.drivername))
            return url.render_as_string(hide_password=False)
        url = self._url("postgresql+psycopg2", {"sslmode": "require"})
        return url.render_as_string(hide_password=False)


_db_settings: DatabaseSettings | None = None


def get_db_settings() -> DatabaseSettings:
    global _db_settings
    if _db_settings is None:
        _db_settings = DatabaseSettings()
        logger.info(
            "DatabaseSettings loaded",
            db_host=_db_settings.host if not _db_settings.url else None,
            db_name=_db_settings.name if not _db_settings.url else None,
            url_override=bool(_db_settings.url),
        )
    return _db_settings
