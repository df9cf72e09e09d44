"""Jinja2 rendering of account notification emails."""

from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, TemplateError
from structlog import get_logger

from src.core.config.settings import Settings
from src.core.exceptions import NotificationError
from src.domain.entities.user import User
from src.domain.interfaces.infrastructure import INotificationRenderer
from src.domain.value_objects.notification import Notification

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


class NotificationRenderer(INotificationRenderer):
    """Renders the verification and password reset emails.

    Each message links back to the API route that consumes its token, built
    from ``PUBLIC_BASE_URL`` and ``API_PREFIX``.

    Args:
        app_name: Product name shown in the emails.
        base_url: Public URL of the API, without the version prefix.
        api_prefix: Version prefix, e.g. ``/api/v1``.
        verification_ttl_minutes: Shown to the user in the verification email.
        reset_ttl_minutes: Shown to the user in the reset email.
        templates_dir: Directory holding the HTML templates.
    """

    def __init__(
        self,
        app_name: str,
        base_url: str,
        api_prefix: str,
        verification_ttl_minutes: int,
        reset_ttl_minutes: int,
        templates_dir: Optional[Path] = None,
    ):
        self._app_name = app_name
        self._links_base = f"{base_url.rstrip('/')}/{api_prefix.strip('/')}/auth"
        self._verification_ttl_minutes = verification_ttl_minutes
        self._reset_ttl_minutes = reset_ttl_minutes
        self._jinja_env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationRenderer":
        return cls(
            app_name=settings.PROJECT_NAME,
            base_url=settings.PUBLIC_BASE_URL,
            api_prefix=settings.API_PREFIX,
            verification_ttl_minutes=settings.EMAIL_VERIFICATION_TOKEN_EXPIRE_MINUTES,
            reset_ttl_minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES,
        )

    def verification_url(self, unhashed_token: str) -> str:
        return f"{self._links_base}/verify-email/{unhashed_token}"

    def reset_url(self, unhashed_token: str) -> str:
        return f"{self._links_base}/reset-password/{unhashed_token}"

    def render_email_verification(self, user: User, unhashed_token: str) -> Notification:
        subject = f"Verify your {self._app_name} email address"
        body = self._render(
            "email_verification.html",
            subject=subject,
            username=user.username,
            app_name=self._app_name,
            action_url=self.verification_url(unhashed_token),
            expires_in_minutes=self._verification_ttl_minutes,
        )
        return Notification(
            recipient=user.email,
            subject=subject,
            rendered_body=body,
            one_time_token=unhashed_token,
        )

    def render_password_reset(self, user: User, unhashed_token: str) -> Notification:
        subject = f"Reset your {self._app_name} password"
        body = self._render(
            "password_reset.html",
            subject=subject,
            username=user.username,
            app_name=self._app_name,
            action_url=self.reset_url(unhashed_token),
            expires_in_minutes=self._reset_ttl_minutes,
        )
        return Notification(
            recipient=user.email,
            subject=subject,
            rendered_body=body,
            one_time_token=unhashed_token,
        )

    def _render(self, template_name: str, **context: Any) -> str:
        try:
            return self._jinja_env.get_template(template_name).render(**context)
        except TemplateError as e:
            logger.error("Template rendering failed", template=template_name, error=str(e))
            raise NotificationError(f"Template rendering failed: {template_name}") from e
