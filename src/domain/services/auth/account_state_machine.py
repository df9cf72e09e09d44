"""Account State Machine domain service.

Governs the legal transitions of an account:

- ``register`` creates an account in the unverified state and sends a
  verification token.
- ``verify`` moves it from unverified to verified, exactly once.
- ``request_password_reset`` / ``reset_password`` drive the orthogonal
  reset-pending flag, from either verification state.
- ``login`` / ``logout`` / ``refresh`` / ``change_password`` manage the
  authenticated session.

Login is allowed before the email address is verified; the verification state
is recorded on the login event instead of being enforced here.

Notifications are sent only after the state change they announce has been
committed. A failed or timed-out delivery is logged, published as a domain
event and reported to the caller; it never undoes the committed change.
"""

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from typing import List

import structlog

from src.core.exceptions import (
    AlreadyVerifiedError,
    DuplicateIdentityError,
    InvalidCredentialsError,
    NotFoundError,
    NotificationError,
    TokenInvalidOrExpiredError,
)
from src.core.logging import mask_email, mask_token
from src.domain.entities.user import User
from src.domain.events.account_events import (
    AccountRegisteredEvent,
    BaseDomainEvent,
    EmailVerifiedEvent,
    NotificationDeliveryFailedEvent,
    PasswordChangedEvent,
    PasswordResetCompletedEvent,
    PasswordResetRequestedEvent,
    VerificationTokenIssuedEvent,
)
from src.domain.interfaces.infrastructure import (
    IClock,
    IEventPublisher,
    INotificationRenderer,
    INotificationSink,
)
from src.domain.services.auth.credential_store import CredentialStore
from src.domain.services.auth.session_issuer import SessionIssuer
from src.domain.services.auth.token_codec import TokenCodec
from src.domain.value_objects.notification import Notification, NotificationOutcome
from src.domain.value_objects.predicates import FieldEquals, all_of, any_of
from src.domain.value_objects.session_tokens import SessionTokens

logger = structlog.get_logger(__name__)

EMAIL_VERIFICATION = "email_verification"
PASSWORD_RESET = "password_reset"


@dataclass(frozen=True)
class RegistrationResult:
    user: User
    notification: NotificationOutcome


@dataclass(frozen=True)
class LoginResult:
    user: User
    tokens: SessionTokens


class AccountStateMachine:
    """Entry point of every account lifecycle operation.

    Args:
        credentials: Credential fields of accounts.
        sessions: Access/refresh token issuer.
        codec: One-time token generator.
        renderer: Builds verification and reset messages.
        sink: Delivers rendered messages.
        clock: Time source.
        event_publisher: Receives account domain events.
        verification_token_ttl: Lifetime of email verification tokens.
        reset_token_ttl: Lifetime of password reset tokens.
        notification_timeout: Upper bound in seconds on a single delivery.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        sessions: SessionIssuer,
        codec: TokenCodec,
        renderer: INotificationRenderer,
        sink: INotificationSink,
        clock: IClock,
        event_publisher: IEventPublisher,
        verification_token_ttl: timedelta = timedelta(minutes=20),
        reset_token_ttl: timedelta = timedelta(minutes=20),
        notification_timeout: float = 10.0,
    ):
        self._credentials = credentials
        self._sessions = sessions
        self._codec = codec
        self._renderer = renderer
        self._sink = sink
        self._clock = clock
        self._event_publisher = event_publisher
        self._verification_token_ttl = verification_token_ttl
        self._reset_token_ttl = reset_token_ttl
        self._notification_timeout = notification_timeout

    # ------------------------------------------------------------------
    # Registration and verification
    # ------------------------------------------------------------------

    async def register(self, username: str, email: str, password: str) -> RegistrationResult:
        """Creates an unverified account and sends its first verification token.

        Raises:
            DuplicateIdentityError: If the username or email is already registered.
        """
        logger.info("Registration started", email=mask_email(email))
        if await self._credentials.find_by_identity(username, email) is not None:
            logger.warning("Registration rejected, identity taken", email=mask_email(email))
            raise DuplicateIdentityError()

        pair = self._codec.generate_token_pair(self._verification_token_ttl)
        user = await self._credentials.create_account(
            username,
            email,
            password,
            verification_token=pair.hashed_token,
            verification_expires_at=pair.expires_at,
        )

        await self._publish_many(
            [
                AccountRegisteredEvent(
                    occurred_at=self._clock.now(),
                    user_id=user.id,
                    correlation_id=None,
                    username=user.username,
                    email=user.email,
                ),
                VerificationTokenIssuedEvent(
                    occurred_at=self._clock.now(),
                    user_id=user.id,
                    correlation_id=None,
                    token_expires_at=pair.expires_at,
                ),
            ]
        )

        outcome = await self._notify(
            user,
            self._renderer.render_email_verification(user, pair.unhashed_token),
            EMAIL_VERIFICATION,
        )
        logger.info("Registration completed", user_id=user.id, notification_delivered=outcome.delivered)
        return RegistrationResult(user=user, notification=outcome)

    async def verify(self, token: str) -> User:
        """Marks the account holding `token` as verified.

        Raises:
            AlreadyVerifiedError: The token already verified its account, or
                belongs to an account that is verified.
            TokenInvalidOrExpiredError: No pending token matches, or it expired.
        """
        if not token:
            raise TokenInvalidOrExpiredError()
        hashed_token = self._codec.hash(token)

        user = await self._credentials.consume_verification_token(hashed_token)
        if user is not None:
            logger.info("Email verified", user_id=user.id, email=mask_email(user.email))
            await self._publish(
                EmailVerifiedEvent(
                    occurred_at=self._clock.now(),
                    user_id=user.id,
                    correlation_id=None,
                    email=user.email,
                )
            )
            return user

        already_verified = await self._credentials.find_one(
            any_of(
                FieldEquals("email_verification_consumed_token", hashed_token),
                all_of(
                    FieldEquals("email_verification_token", hashed_token),
                    FieldEquals("is_email_verified", True),
                ),
            )
        )
        if already_verified is not None:
            logger.info("Verification replayed on verified account", user_id=already_verified.id)
            raise AlreadyVerifiedError()

        logger.info("Verification token invalid or expired", token_prefix=mask_token(hashed_token))
        raise TokenInvalidOrExpiredError()

    async def resend_verification(self, user: User) -> NotificationOutcome:
        """Replaces the pending verification token with a new one and sends it.

        Raises:
            AlreadyVerifiedError: If the account is already verified, including
                when verification commits between the check and the write. No
                token is stored in either case.
        """
        current = await self._reload(user)
        if current.is_email_verified:
            raise AlreadyVerifiedError()

        pair = self._codec.generate_token_pair(self._verification_token_ttl)
        current = await self._credentials.set_verification_token(current, pair.hashed_token, pair.expires_at)
        await self._publish(
            VerificationTokenIssuedEvent(
                occurred_at=self._clock.now(),
                user_id=current.id,
                correlation_id=None,
                token_expires_at=pair.expires_at,
                reason="resend",
            )
        )
        return await self._notify(
            current,
            self._renderer.render_email_verification(current, pair.unhashed_token),
            EMAIL_VERIFICATION,
        )

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    async def request_password_reset(self, email: str) -> NotificationOutcome:
        """Issues a reset token for the account registered with `email`.

        Any earlier reset token of the account stops working. The verification
        state is left untouched.

        Raises:
            NotFoundError: If no account uses `email`.
        """
        user = await self._credentials.find_one(FieldEquals("email", (email or "").strip().lower()))
        if user is None:
            logger.info("Password reset requested for unknown email", email=mask_email(email))
            raise NotFoundError()

        pair = self._codec.generate_token_pair(self._reset_token_ttl)
        user = await self._credentials.set_reset_token(user, pair.hashed_token, pair.expires_at)
        logger.info("Password reset requested", user_id=user.id, expires_at=pair.expires_at.isoformat())
        await self._publish(
            PasswordResetRequestedEvent(
                occurred_at=self._clock.now(),
                user_id=user.id,
                correlation_id=None,
                email=user.email,
                token_expires_at=pair.expires_at,
            )
        )
        return await self._notify(
            user,
            self._renderer.render_password_reset(user, pair.unhashed_token),
            PASSWORD_RESET,
        )

    async def reset_password(self, token: str, new_password: str) -> User:
        """Consumes a reset token and replaces the password.

        The account's session is revoked along with the old password.

        Raises:
            TokenInvalidOrExpiredError: If the token is unknown, stale or expired.
        """
        if not token:
            raise TokenInvalidOrExpiredError()
        user = await self._credentials.consume_reset_token(self._codec.hash(token))
        if user is None:
            raise TokenInvalidOrExpiredError()

        user = await self._credentials.set_password(user, new_password, revoke_sessions=True)
        logger.info("Password reset completed", user_id=user.id)
        await self._publish(
            PasswordResetCompletedEvent(
                occurred_at=self._clock.now(),
                user_id=user.id,
                correlation_id=None,
                email=user.email,
            )
        )
        return user

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def login(self, identity: str, password: str) -> LoginResult:
        """Authenticates by username or email and starts a session.

        Raises:
            InvalidCredentialsError: Unknown identity or wrong password. Both
                cases are reported identically.
        """
        user = await self._credentials.find_by_identity(identity)
        if user is None or not self._credentials.verify_password(user, password):
            logger.warning("Login failed", identity_known=user is not None)
            raise InvalidCredentialsError()

        tokens = await self._sessions.start_session(user)
        return LoginResult(user=user, tokens=tokens)

    async def logout(self, user: User) -> None:
        await self._sessions.end_session(user)

    async def refresh(self, refresh_token: str) -> SessionTokens:
        return await self._sessions.rotate_refresh_token(refresh_token)

    async def current_user(self, access_token: str) -> User:
        return await self._sessions.authenticate(access_token)

    async def change_password(self, user: User, old_password: str, new_password: str) -> User:
        """Replaces the password of an authenticated account.

        Raises:
            InvalidCredentialsError: If `old_password` is wrong.
        """
        current = await self._reload(user)
        if not self._credentials.verify_password(current, old_password):
            logger.warning("Password change rejected, wrong current password", user_id=current.id)
            raise InvalidCredentialsError()

        current = await self._credentials.set_password(current, new_password)
        await self._publish(
            PasswordChangedEvent(
                occurred_at=self._clock.now(),
                user_id=current.id,
                correlation_id=None,
                email=current.email,
            )
        )
        return current

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _reload(self, user: User) -> User:
        current = await self._credentials.find_by_id(user.id)
        if current is None:
            raise NotFoundError()
        return current

    async def _notify(self, user: User, notification: Notification, kind: str) -> NotificationOutcome:
        """Hands a message to the sink, bounded by the notification timeout."""
        try:
            await asyncio.wait_for(self._sink.send(notification), timeout=self._notification_timeout)
        except (NotificationError, asyncio.TimeoutError) as e:
            error_code = e.code if isinstance(e, NotificationError) else "notification_timeout"
            logger.error(
                "Notification delivery failed",
                user_id=user.id,
                email=mask_email(user.email),
                notification_kind=kind,
                error_code=error_code,
                manual_resend_required=True,
            )
            await self._publish(
                NotificationDeliveryFailedEvent(
                    occurred_at=self._clock.now(),
                    user_id=user.id,
                    correlation_id=None,
                    notification_kind=kind,
                    error_code=error_code,
                )
            )
            return NotificationOutcome(delivered=False, error_code=error_code)

        logger.debug("Notification delivered", user_id=user.id, notification_kind=kind)
        return NotificationOutcome(delivered=True)

    async def _publish(self, event: BaseDomainEvent) -> None:
        await self._event_publisher.publish(event)

    async def _publish_many(self, events: List[BaseDomainEvent]) -> None:
        await self._event_publisher.publish_many(events)
