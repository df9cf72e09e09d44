"""
Application-specific settings.
"""
from pydantic import Field
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Defines application-wide settings like project name, environment and logging.

    Security Note:
        - PUBLIC_BASE_URL is embedded in verification and password reset links;
          it must point at a trusted host in production to avoid sending users
          to an attacker-controlled domain.
    """
    PROJECT_NAME: str = "credence"
    VERSION: str = "0.1.0"
    APP_ENV: str = "development"
    DEBUG: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    PUBLIC_BASE_URL: str = Field(default="http://localhost:8000")
    API_PREFIX: str = "/api/v1"
