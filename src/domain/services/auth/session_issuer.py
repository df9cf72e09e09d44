"""Session Issuer domain service.

Access tokens are short-lived JWTs that are verified by signature alone and
never stored. Refresh tokens are longer-lived JWTs whose sha256 digest is stored
on the account; each account holds at most one, and every successful refresh
replaces it through a compare-and-swap so that a superseded token can be told
apart from a forged one.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
import structlog

from src.core.config.auth import AuthSettings
from src.core.exceptions import InvalidTokenError, TokenReuseDetectedError
from src.core.logging import mask_token
from src.domain.entities.user import User
from src.domain.events.account_events import (
    RefreshTokenReuseDetectedEvent,
    SessionRefreshedEvent,
    UserLoggedInEvent,
    UserLoggedOutEvent,
)
from src.domain.interfaces.infrastructure import IClock, IEventPublisher
from src.domain.services.auth.credential_store import CredentialStore
from src.domain.services.auth.token_codec import TokenCodec
from src.domain.value_objects.session_tokens import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    SessionTokens,
    TokenClaims,
)

logger = structlog.get_logger(__name__)

_REQUIRED_CLAIMS = ["sub", "iat", "exp", "jti", "type", "iss", "aud"]


class SessionIssuer:
    """Issues, verifies, rotates and ends sessions.

    Expiry of both token kinds is checked against the injected clock rather than
    PyJWT's own wall-clock check, so issuing and verifying share one time source.

    Args:
        settings: JWT algorithm, keys, issuer, audience and lifetimes.
        credentials: Store holding the refresh token digest of each account.
        codec: Source of random `jti` values.
        clock: Time source.
        event_publisher: Optional sink for session domain events.
    """

    def __init__(
        self,
        settings: AuthSettings,
        credentials: CredentialStore,
        codec: TokenCodec,
        clock: IClock,
        event_publisher: Optional[IEventPublisher] = None,
    ):
        self._settings = settings
        self._credentials = credentials
        self._codec = codec
        self._clock = clock
        self._event_publisher = event_publisher

    @property
    def access_token_ttl(self) -> timedelta:
        return timedelta(minutes=self._settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    @property
    def refresh_token_ttl(self) -> timedelta:
        return timedelta(days=self._settings.REFRESH_TOKEN_EXPIRE_DAYS)

    # ------------------------------------------------------------------
    # Issuing
    # ------------------------------------------------------------------

    def issue_access_token(self, user_id: int) -> str:
        """Signs a stateless access token for `user_id`."""
        return self._encode(user_id, ACCESS_TOKEN_TYPE, self.access_token_ttl)

    def issue_refresh_token(self, user_id: int) -> str:
        """Signs a refresh token for `user_id`.

        The token is not stored here; callers pair it with
        `CredentialStore.set_refresh_token` or `swap_refresh_token`.
        """
        return self._encode(user_id, REFRESH_TOKEN_TYPE, self.refresh_token_ttl)

    async def start_session(self, user: User) -> SessionTokens:
        """Issues a fresh token pair and makes its refresh token the only valid one.

        Any previous refresh chain of the account is replaced wholesale.
        """
        tokens = self._issue_pair(user.id)
        await self._credentials.set_refresh_token(user, tokens.refresh_token)
        logger.info("Session started", user_id=user.id, email_verified=user.is_email_verified)
        await self._publish(
            UserLoggedInEvent(
                occurred_at=self._clock.now(),
                user_id=user.id,
                correlation_id=None,
                username=user.username,
                email_verified=user.is_email_verified,
            )
        )
        return tokens

    # ------------------------------------------------------------------
    # Verifying
    # ------------------------------------------------------------------

    def decode(self, token: str, expected_type: str) -> TokenClaims:
        """Verifies signature, type, issuer, audience and expiry of a session token.

        Raises:
            InvalidTokenError: If any check fails.
        """
        if not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(
                token,
                self._settings.verification_key(expected_type),
                algorithms=[self._settings.JWT_ALGORITHM],
                issuer=self._settings.JWT_ISSUER,
                audience=self._settings.JWT_AUDIENCE,
                options={"verify_exp": False, "verify_iat": False, "require": _REQUIRED_CLAIMS},
            )
        except jwt.PyJWTError as e:
            logger.warning("Session token rejected", token_type=expected_type, error=str(e))
            raise InvalidTokenError() from e

        if payload.get("type") != expected_type:
            logger.warning("Session token has wrong type", expected=expected_type, actual=payload.get("type"))
            raise InvalidTokenError()

        try:
            claims = TokenClaims(
                user_id=int(payload["sub"]),
                token_type=payload["type"],
                jti=str(payload["jti"]),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning("Session token has malformed claims", token_type=expected_type)
            raise InvalidTokenError() from e

        if self._clock.now() >= claims.expires_at:
            logger.info("Session token expired", token_type=expected_type, user_id=claims.user_id)
            raise InvalidTokenError()
        return claims

    async def authenticate(self, access_token: str) -> User:
        """Resolves a bearer access token to its account.

        Raises:
            InvalidTokenError: If the token is invalid or the account no longer exists.
        """
        claims = self.decode(access_token, ACCESS_TOKEN_TYPE)
        user = await self._credentials.find_by_id(claims.user_id)
        if user is None:
            logger.warning("Access token for unknown account", user_id=claims.user_id)
            raise InvalidTokenError()
        return user

    # ------------------------------------------------------------------
    # Rotation and logout
    # ------------------------------------------------------------------

    async def rotate_refresh_token(self, presented_token: str) -> SessionTokens:
        """Exchanges the current refresh token for a new access/refresh pair.

        Raises:
            InvalidTokenError: The token fails verification, its account is gone
                or the session was ended by logout.
            TokenReuseDetectedError: The token was valid once but has been
                superseded by a later rotation.
        """
        claims = self.decode(presented_token, REFRESH_TOKEN_TYPE)
        user = await self._credentials.find_by_id(claims.user_id)
        if user is None:
            logger.warning("Refresh token for unknown account", user_id=claims.user_id)
            raise InvalidTokenError()

        if user.refresh_token is None:
            logger.info("Refresh attempted on ended session", user_id=user.id)
            raise InvalidTokenError()

        if not TokenCodec.matches(presented_token, user.refresh_token):
            await self._handle_reuse(user, presented_token, current_digest=user.refresh_token)

        tokens = self._issue_pair(user.id)
        rotated = await self._credentials.swap_refresh_token(user.id, presented_token, tokens.refresh_token)
        if rotated is None:
            # Another rotation or a logout committed between the read and the swap.
            await self._handle_reuse(user, presented_token, current_digest=None)

        logger.info("Refresh token rotated", user_id=user.id, jti=mask_token(claims.jti))
        await self._publish(SessionRefreshedEvent(occurred_at=self._clock.now(), user_id=user.id, correlation_id=None))
        return tokens

    async def end_session(self, user: User) -> None:
        """Clears the refresh token; any later rotation for the account fails."""
        await self._credentials.set_refresh_token(user, None)
        logger.info("Session ended", user_id=user.id)
        await self._publish(
            UserLoggedOutEvent(
                occurred_at=self._clock.now(),
                user_id=user.id,
                correlation_id=None,
                username=user.username,
            )
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _handle_reuse(self, user: User, presented_token: str, current_digest: Optional[str]) -> None:
        revoked = False
        if self._settings.REVOKE_SESSION_ON_REFRESH_REUSE and current_digest is not None:
            revoked = await self._credentials.revoke_refresh_token(user.id, current_digest) is not None

        token_prefix = mask_token(TokenCodec.hash(presented_token))
        logger.warning(
            "Refresh token reuse detected",
            user_id=user.id,
            token_prefix=token_prefix,
            session_revoked=revoked,
        )
        await self._publish(
            RefreshTokenReuseDetectedEvent(
                occurred_at=self._clock.now(),
                user_id=user.id,
                correlation_id=None,
                token_prefix=token_prefix or "",
                session_revoked=revoked,
            )
        )
        raise TokenReuseDetectedError()

    def _issue_pair(self, user_id: int) -> SessionTokens:
        return SessionTokens(
            access_token=self.issue_access_token(user_id),
            refresh_token=self.issue_refresh_token(user_id),
            expires_in=int(self.access_token_ttl.total_seconds()),
        )

    def _encode(self, user_id: int, token_type: str, ttl: timedelta) -> str:
        now = self._clock.now()
        payload: Dict[str, Any] = {
            "sub": str(user_id),
            "type": token_type,
            "iss": self._settings.JWT_ISSUER,
            "aud": self._settings.JWT_AUDIENCE,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": self._codec.generate_token(),
        }
        token = jwt.encode(
            payload,
            self._settings.signing_key(token_type),
            algorithm=self._settings.JWT_ALGORITHM,
        )
        logger.debug("Session token issued", user_id=user_id, token_type=token_type, jti=mask_token(payload["jti"]))
        return token

    async def _publish(self, event) -> None:
        if self._event_publisher is not None:
            await self._event_publisher.publish(event)
