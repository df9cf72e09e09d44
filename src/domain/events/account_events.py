"""Account Domain Events.

These events represent significant business occurrences in the account
lifecycle that other parts of the system may need to react to (audit logging,
security monitoring, manual follow-up of failed deliveries).
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class BaseDomainEvent:
    """Base class for all domain events.

    Attributes:
        occurred_at: When the event occurred
        user_id: ID of the account associated with the event
        correlation_id: Optional correlation ID for tracking
    """

    occurred_at: datetime
    user_id: Optional[int]
    correlation_id: Optional[str]

    def __post_init__(self):
        """Ensure occurred_at is timezone-aware."""
        if not self.occurred_at.tzinfo:
            object.__setattr__(self, "occurred_at", self.occurred_at.replace(tzinfo=timezone.utc))


@dataclass(frozen=True)
class AccountRegisteredEvent(BaseDomainEvent):
    """Emitted when an account is created in the unverified state."""

    username: str
    email: str


@dataclass(frozen=True)
class EmailVerifiedEvent(BaseDomainEvent):
    """Emitted when an account moves from unverified to verified."""

    email: str


@dataclass(frozen=True)
class VerificationTokenIssuedEvent(BaseDomainEvent):
    """Emitted when a verification token is stored for an account.

    Attributes:
        token_expires_at: When the verification token expires
        reason: "registration" or "resend"
    """

    token_expires_at: datetime
    reason: str = "registration"


@dataclass(frozen=True)
class PasswordResetRequestedEvent(BaseDomainEvent):
    """Emitted when a password reset token is stored for an account."""

    email: str
    token_expires_at: datetime


@dataclass(frozen=True)
class PasswordResetCompletedEvent(BaseDomainEvent):
    """Emitted when a password has been replaced through a reset token."""

    email: str
    reset_method: str = "token"


@dataclass(frozen=True)
class PasswordChangedEvent(BaseDomainEvent):
    """Emitted when an authenticated user changes their password."""

    email: str


@dataclass(frozen=True)
class UserLoggedInEvent(BaseDomainEvent):
    """Emitted when a session is started.

    Attributes:
        email_verified: Verification state at login time; unverified logins
            are allowed and tracked here.
    """

    username: str
    email_verified: bool


@dataclass(frozen=True)
class UserLoggedOutEvent(BaseDomainEvent):
    """Emitted when a session is ended."""

    username: str


@dataclass(frozen=True)
class SessionRefreshedEvent(BaseDomainEvent):
    """Emitted when a refresh token has been rotated."""


@dataclass(frozen=True)
class RefreshTokenReuseDetectedEvent(BaseDomainEvent):
    """Emitted when a superseded refresh token is replayed.

    This event is useful for:
    - Security monitoring and alerting on possible token theft
    - Forensics on the affected refresh chain

    Attributes:
        token_prefix: Masked digest prefix of the presented token
        session_revoked: Whether the active chain was revoked in response
    """

    token_prefix: str
    session_revoked: bool = False


@dataclass(frozen=True)
class NotificationDeliveryFailedEvent(BaseDomainEvent):
    """Emitted when a notification failed after its state change was committed.

    Operators use it to trigger a manual resend.

    Attributes:
        notification_kind: "email_verification" or "password_reset"
        error_code: Stable error code of the failure
    """

    notification_kind: str
    error_code: str
