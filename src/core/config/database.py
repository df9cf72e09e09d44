"""
Database connection settings.
"""
import logging

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

IN_MEMORY_DATABASE_URL = "memory://"


class DatabaseSettings(BaseSettings):
    """
    Defines settings for connecting to the account database.

    When DATABASE_URL is not set explicitly it is assembled from the POSTGRES_*
    fields for the asyncpg driver. If POSTGRES_HOST is also unset, the in-memory
    account store is used (``memory://``), which is only suitable for development
    and tests.

    Security Note:
        - POSTGRES_PASSWORD must be securely stored and never logged or exposed
          in version control (OWASP A02:2021 - Cryptographic Failures).
    Performance Note:
        - Tune POSTGRES_POOL_SIZE and POSTGRES_MAX_OVERFLOW based on application
          load and database server capacity to optimize connection handling.
    """
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = SecretStr("")
    POSTGRES_DB: str = "credence"
    POSTGRES_HOST: str = ""
    POSTGRES_PORT: int = Field(ge=1, le=65535, default=5432)
    POSTGRES_POOL_SIZE: int = Field(ge=1, default=10)
    POSTGRES_MAX_OVERFLOW: int = Field(ge=0, default=20)
    POSTGRES_POOL_TIMEOUT: float = Field(ge=1.0, default=5.0)

    DATABASE_ECHO: bool = False
    DATABASE_CREATE_TABLES: bool = True
    DATABASE_CONNECT_RETRIES: int = Field(ge=1, default=5)
    DATABASE_URL: str = Field(default="", validate_default=True)

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_url(cls, v: str | None, info: ValidationInfo) -> str:
        """
        Assembles the database connection URL if not provided explicitly.

        Args:
            v: Explicitly provided URL or None.
            info: Validation context with other field values.

        Returns:
            Assembled or provided database URL.
        """
        if v:
            return v

        values = info.data
        if not values.get("POSTGRES_HOST"):
            logger.warning("No database configured, falling back to the in-memory account store.")
            return IN_MEMORY_DATABASE_URL

        password = values.get("POSTGRES_PASSWORD")
        password = password.get_secret_value() if password else ""
        url = (
            f"postgresql+asyncpg://{values.get('POSTGRES_USER')}:"
            f"{password}@{values.get('POSTGRES_HOST')}:"
            f"{values.get('POSTGRES_PORT')}/{values.get('POSTGRES_DB')}"
        )
        logger.debug("Assembled DATABASE_URL (password masked for security).")
        return url

    @property
    def uses_in_memory_store(self) -> bool:
        return self.DATABASE_URL == IN_MEMORY_DATABASE_URL
