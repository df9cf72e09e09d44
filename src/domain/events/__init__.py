"""Domain Events.

All events are immutable and represent significant account occurrences that
other parts of the system (auditing, security monitoring) may react to.

- Lifecycle: registration, verification, password reset and change
- Sessions: login, logout, refresh rotation and refresh token reuse
- Delivery: notifications that could not be sent
"""

from .account_events import (
    AccountRegisteredEvent,
    BaseDomainEvent,
    EmailVerifiedEvent,
    NotificationDeliveryFailedEvent,
    PasswordChangedEvent,
    PasswordResetCompletedEvent,
    PasswordResetRequestedEvent,
    RefreshTokenReuseDetectedEvent,
    SessionRefreshedEvent,
    UserLoggedInEvent,
    UserLoggedOutEvent,
    VerificationTokenIssuedEvent,
)

__all__ = [
    "BaseDomainEvent",
    # Lifecycle
    "AccountRegisteredEvent",
    "VerificationTokenIssuedEvent",
    "EmailVerifiedEvent",
    "PasswordResetRequestedEvent",
    "PasswordResetCompletedEvent",
    "PasswordChangedEvent",
    # Sessions
    "UserLoggedInEvent",
    "UserLoggedOutEvent",
    "SessionRefreshedEvent",
    "RefreshTokenReuseDetectedEvent",
    # Delivery
    "NotificationDeliveryFailedEvent",
]
