"""Application configuration."""

from typing import Literal
from urllib.parse import quote

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Application settings.

    Environment variables will be loaded and validated using Pydantic.
    Build one instance at the entry point and hand it to the components
    that need it.
    """

    # Catalog (Postgres) Settings
    DATABASE_URL: str | None = None
    POSTGRES_USER: str = "admin"
    POSTGRES_PASSWD: str = "admin"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = Field(default=5432, gt=0)
    POSTGRES_DATABASE: str = "postgres"

    # Transport (Redis) Settings
    TRANSPORT_USER: str = ""
    TRANSPORT_PASSWD: str = ""
    TRANSPORT_HOST: str = "localhost"
    TRANSPORT_PORT: int = Field(default=6379, gt=0)
    TRANSPORT_VHOST: int = Field(default=0, ge=0)  # logical Redis database
    TRANSPORT_QUEUE: str = "watchfolder"
    TRANSPORT_TIMEOUT: int = Field(default=5, gt=0)

    # Run Settings
    CATALOG_RECORD_KIND: Literal["checksum", "droid"] = "checksum"
    CONFIRMATION_TOKEN: str = "yes"
    FIELD_DEFAULT: str = "default"

    # Watchfolder message Settings
    CP_NAME: str = "batchin"
    WATCHFOLDER_USERNAME: str = ""
    WATCHFOLDER_PASSWORD: str = ""

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # Metrics Settings
    METRICS_TEXTFILE: str | None = None  # .prom file written at exit

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_queue_name(self) -> "Settings":
        """Reject a blank destination queue."""
        self.TRANSPORT_QUEUE = self.TRANSPORT_QUEUE.strip()
        if not self.TRANSPORT_QUEUE:
            raise ValueError("TRANSPORT_QUEUE must not be empty")
        return self

    @model_validator(mode="after")
    def validate_confirmation_token(self) -> "Settings":
        """Reject a blank affirmative token, it would match an empty answer."""
        if not self.CONFIRMATION_TOKEN.strip():
            raise ValueError("CONFIRMATION_TOKEN must not be empty")
        return self

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL for the catalog database."""
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # Force the sync psycopg2 driver
            if url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql+psycopg2://", 1)
            elif url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+psycopg2://", 1)
            return url
        return URL.create(
            "postgresql+psycopg2",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            database=self.POSTGRES_DATABASE,
        ).render_as_string(hide_password=False)

    @property
    def transport_url(self) -> str:
        """Redis URL for the message transport."""
        credentials = ""
        if self.TRANSPORT_USER or self.TRANSPORT_PASSWD:
            credentials = (
                f"{quote(self.TRANSPORT_USER, safe='')}:"
                f"{quote(self.TRANSPORT_PASSWD, safe='')}@"
            )
        return (
            f"redis://{credentials}{self.TRANSPORT_HOST}:{self.TRANSPORT_PORT}"
            f"/{self.TRANSPORT_VHOST}"
        )
