"""Main application settings and configuration management.

This module composes all the application settings from the different modules
(app, database, auth, email) into a single `Settings` class.

Settings are loaded from environment variables and .env files and validated on
construction. There is deliberately no module-level instance: the application
builds one with `get_settings()` and hands it to `AppContext`, and tests build
their own with explicit values.

Environment Support:
- Development: Uses .env
- Test: Uses .env.test
- Staging: Uses .env.staging, SMTP credentials required
- Production: Uses .env.production, SMTP credentials required
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings
from .email import EmailSettings

logger = logging.getLogger(__name__)
logging.getLogger("passlib").setLevel(logging.ERROR)

ENV_FILES = {
    "development": ".env",
    "test": ".env.test",
    "staging": ".env.staging",
    "production": ".env.production",
}


class Settings(AppSettings, DatabaseSettings, AuthSettings, EmailSettings):
    """The main settings class that aggregates all application configurations.

    Security Note:
        - Ensure all sensitive fields (token secrets, passwords, JWT keys) are
          securely stored and never logged or exposed
          (OWASP A02:2021 - Cryptographic Failures).
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    def validate_required_fields(self) -> None:
        """Validates configuration that cannot be checked field by field.

        Raises:
            ValueError: If the email configuration is unusable outside development.
        """
        try:
            self.validate_smtp_config()
        except ValueError as e:
            if self.APP_ENV in ("development", "test"):
                logger.warning(f"Email config warning - {e}")
            else:
                logger.error(f"Email configuration error: {e}")
                raise
        if self.uses_in_memory_store and self.APP_ENV in ("staging", "production"):
            raise ValueError("An in-memory account store cannot be used in staging or production")


def get_settings(**overrides) -> Settings:
    """Create a settings instance with environment-specific configuration.

    Args:
        **overrides: Explicit field values that take precedence over the
            environment.

    Returns:
        Settings: Validated settings instance
    """
    env = os.getenv("APP_ENV", "development")
    env_file = ENV_FILES.get(env, ".env")

    if Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        settings = Settings(_env_file=env_file, **overrides)
    else:
        logger.info(f"No {env_file} file found, using environment variables only (environment: {env})")
        settings = Settings(_env_file=None, **overrides)

    settings.validate_required_fields()
    return settings
