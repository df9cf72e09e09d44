"""Notification sinks: where rendered account emails are delivered.

- `SmtpNotificationSink` sends through fastapi-mail.
- `LoggingNotificationSink` only logs that a message would have been sent
  (development).
- `InMemoryNotificationSink` keeps an outbox list (tests).
"""

from typing import List

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from structlog import get_logger

from src.core.config.email import EmailSettings
from src.core.exceptions import NotificationError
from src.core.logging import mask_email
from src.domain.interfaces.infrastructure import INotificationSink
from src.domain.value_objects.notification import Notification

logger = get_logger(__name__)


class SmtpNotificationSink(INotificationSink):
    """Delivers notifications over SMTP with fastapi-mail."""

    def __init__(self, settings: EmailSettings):
        password = settings.EMAIL_SMTP_PASSWORD.get_secret_value() if settings.EMAIL_SMTP_PASSWORD else ""
        config = ConnectionConfig(
            MAIL_USERNAME=settings.EMAIL_SMTP_USERNAME or "",
            MAIL_PASSWORD=password,
            MAIL_FROM=settings.EMAIL_FROM,
            MAIL_PORT=settings.EMAIL_SMTP_PORT,
            MAIL_SERVER=settings.EMAIL_SMTP_HOST,
            MAIL_FROM_NAME=settings.EMAIL_FROM_NAME,
            MAIL_STARTTLS=settings.EMAIL_SMTP_USE_TLS,
            MAIL_SSL_TLS=settings.EMAIL_SMTP_USE_SSL,
            USE_CREDENTIALS=bool(settings.EMAIL_SMTP_USERNAME and password),
            VALIDATE_CERTS=True,  # Always validate certificates
        )
        self._fastmail = FastMail(config)
        logger.info("SMTP notification sink configured", smtp_host=settings.EMAIL_SMTP_HOST)

    async def send(self, notification: Notification) -> None:
        message = MessageSchema(
            subject=notification.subject,
            recipients=[notification.recipient],
            body=notification.rendered_body,
            subtype=MessageType.html,
        )
        try:
            await self._fastmail.send_message(message)
        except Exception as e:
            logger.error(
                "Failed to send email",
                to_email=mask_email(notification.recipient),
                subject=notification.subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise NotificationError(f"Failed to send email: {type(e).__name__}") from e

        logger.info("Email sent", to_email=mask_email(notification.recipient), subject=notification.subject)


class LoggingNotificationSink(INotificationSink):
    """Logs notifications instead of sending them. The token is never logged."""

    async def send(self, notification: Notification) -> None:
        logger.info(
            "Email sent in log mode",
            to_email=mask_email(notification.recipient),
            subject=notification.subject,
            html_length=len(notification.rendered_body),
        )


class InMemoryNotificationSink(INotificationSink):
    """Collects notifications in `outbox`."""

    def __init__(self):
        self.outbox: List[Notification] = []

    async def send(self, notification: Notification) -> None:
        self.outbox.append(notification)

    @property
    def last(self) -> Notification:
        return self.outbox[-1]


def build_notification_sink(settings: EmailSettings) -> INotificationSink:
    if settings.EMAIL_BACKEND == "smtp":
        return SmtpNotificationSink(settings)
    if settings.EMAIL_BACKEND == "memory":
        return InMemoryNotificationSink()
    return LoggingNotificationSink()
