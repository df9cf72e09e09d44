"""Email configuration settings for account notifications.

This module defines the parameters used to deliver verification and password
reset emails. Provides secure defaults and validation for production
environments.
"""

from typing import Literal, Optional

from pydantic import EmailStr, Field, SecretStr
from pydantic_settings import BaseSettings


class EmailSettings(BaseSettings):
    """Email configuration settings with secure defaults and validation.

    Security considerations:
    - SMTP credentials are handled as SecretStr to prevent logging
    - TLS is enforced by default for security

    Attributes:
        EMAIL_BACKEND: ``smtp`` sends through fastapi-mail, ``log`` only logs the
            message, ``memory`` keeps an outbox in process (tests).
        EMAIL_SMTP_HOST: SMTP server hostname
        EMAIL_SMTP_PORT: SMTP server port (587 for TLS, 465 for SSL)
        EMAIL_SMTP_USERNAME: SMTP authentication username
        EMAIL_SMTP_PASSWORD: SMTP authentication password (SecretStr)
        EMAIL_SMTP_USE_TLS: Enable STARTTLS
        EMAIL_SMTP_USE_SSL: Enable implicit SSL
        EMAIL_FROM: Default sender email address
        EMAIL_FROM_NAME: Default sender name
        NOTIFICATION_TIMEOUT_SECONDS: Upper bound on a single delivery attempt
    """

    EMAIL_BACKEND: Literal["smtp", "log", "memory"] = "log"

    EMAIL_SMTP_HOST: str = Field(default="localhost", description="SMTP server hostname")
    EMAIL_SMTP_PORT: int = Field(
        default=587,
        ge=1,
        le=65535,
        description="SMTP server port (587 for TLS, 465 for SSL)",
    )
    EMAIL_SMTP_USERNAME: Optional[str] = Field(default=None)
    EMAIL_SMTP_PASSWORD: Optional[SecretStr] = Field(default=None)
    EMAIL_SMTP_USE_TLS: bool = Field(default=True)
    EMAIL_SMTP_USE_SSL: bool = Field(default=False)

    EMAIL_FROM: EmailStr = Field(default="noreply@example.com")
    EMAIL_FROM_NAME: str = Field(default="Credence")

    NOTIFICATION_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)

    def validate_smtp_config(self) -> None:
        """Validate SMTP configuration for production use.

        Raises:
            ValueError: If SMTP configuration is invalid or insecure
        """
        if self.EMAIL_BACKEND != "smtp":
            return

        if getattr(self, "APP_ENV", "development") in {"production", "staging"}:
            if not self.EMAIL_SMTP_USERNAME or not self.EMAIL_SMTP_PASSWORD:
                raise ValueError(
                    "EMAIL_SMTP_USERNAME and EMAIL_SMTP_PASSWORD are required in production"
                )

        if not (self.EMAIL_SMTP_USE_TLS or self.EMAIL_SMTP_USE_SSL):
            raise ValueError(
                "Either EMAIL_SMTP_USE_TLS or EMAIL_SMTP_USE_SSL must be enabled for security"
            )

        if self.EMAIL_SMTP_USE_TLS and self.EMAIL_SMTP_USE_SSL:
            raise ValueError(
                "Cannot enable both EMAIL_SMTP_USE_TLS and EMAIL_SMTP_USE_SSL simultaneously"
            )
