"""Credential Store domain service.

Owns every credential field of an account: the password hash, the pending email
verification token, the pending password reset token and the current refresh
token. All mutations go through `IAccountStore.update_conditional`, so each
transition is a single atomic write whose precondition (matching token digest,
unexpired, not yet verified...) is evaluated by the store at write time rather
than by a separate read.

Callers pass token digests, never unhashed tokens, except for refresh tokens
which are hashed here.
"""

from datetime import datetime
from typing import Any, Dict, Optional

import structlog

from src.core.exceptions import AlreadyVerifiedError, NotFoundError
from src.core.logging import mask_email, mask_token
from src.domain.entities.user import User, utc_now
from src.domain.interfaces.infrastructure import IClock
from src.domain.interfaces.repositories import IAccountStore
from src.domain.services.auth.token_codec import TokenCodec
from src.domain.value_objects.predicates import (
    AccountPredicate,
    FieldAfter,
    FieldEquals,
    all_of,
    any_of,
)
from src.utils.security import PasswordHasher

logger = structlog.get_logger(__name__)


class CredentialStore:
    """Reads and conditionally writes the credential fields of accounts.

    Args:
        accounts: Persistence port.
        password_hasher: bcrypt hasher for passwords.
        clock: Time source for expiry checks.
    """

    def __init__(self, accounts: IAccountStore, password_hasher: PasswordHasher, clock: IClock):
        self._accounts = accounts
        self._password_hasher = password_hasher
        self._clock = clock

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def find_by_identity(self, *identities: str) -> Optional[User]:
        """Finds an account whose username OR email equals any of `identities`.

        Identities are compared lower-cased and stripped, matching how they are
        stored.
        """
        normalized = [identity.strip().lower() for identity in identities if identity and identity.strip()]
        if not normalized:
            return None
        predicate = any_of(
            *(FieldEquals(field, value) for value in normalized for field in ("username", "email"))
        )
        return await self._accounts.find_one(predicate)

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self._accounts.find_by_id(user_id)

    async def find_one(self, predicate: AccountPredicate) -> Optional[User]:
        return await self._accounts.find_one(predicate)

    # ------------------------------------------------------------------
    # Account creation and passwords
    # ------------------------------------------------------------------

    async def create_account(
        self,
        username: str,
        email: str,
        password: str,
        verification_token: Optional[str] = None,
        verification_expires_at: Optional[datetime] = None,
    ) -> User:
        """Creates an unverified account, storing only the password hash.

        When a verification token digest is given it is written with the row,
        so the account never exists without its first pending token.

        Raises:
            DuplicateIdentityError: If the username or email is already taken.
        """
        now = utc_now()
        user = await self._accounts.create(
            {
                "username": username.strip().lower(),
                "email": email.strip().lower(),
                "hashed_password": self._password_hasher.hash(password),
                "is_email_verified": False,
                "email_verification_token": verification_token,
                "email_verification_token_expires_at": verification_expires_at,
                "created_at": now,
                "updated_at": now,
            }
        )
        logger.info("Account created", user_id=user.id, email=mask_email(user.email))
        return user

    def verify_password(self, user: User, password: str) -> bool:
        return self._password_hasher.verify(password, user.hashed_password)

    async def set_password(self, user: User, new_password: str, revoke_sessions: bool = False) -> User:
        """Replaces the password hash and invalidates any in-flight reset token.

        Args:
            user: Account to update.
            new_password: New plaintext password; only its hash is stored.
            revoke_sessions: Also clear the refresh token, ending the session.

        Returns:
            The updated account.
        """
        patch: Dict[str, Any] = {
            "hashed_password": self._password_hasher.hash(new_password),
            "forgot_password_token": None,
            "forgot_password_token_expires_at": None,
        }
        if revoke_sessions:
            patch["refresh_token"] = None
        updated = await self._update(user, None, patch)
        logger.info("Password updated", user_id=user.id, sessions_revoked=revoke_sessions)
        return updated

    # ------------------------------------------------------------------
    # Email verification token
    # ------------------------------------------------------------------

    async def set_verification_token(self, user: User, hashed_token: str, expires_at: datetime) -> User:
        """Stores a verification token digest, replacing any pending one.

        Raises:
            AlreadyVerifiedError: If the account is verified at write time.
        """
        updated = await self._accounts.update_conditional(
            user.id,
            FieldEquals("is_email_verified", False),
            {
                "email_verification_token": hashed_token,
                "email_verification_token_expires_at": expires_at,
                "updated_at": utc_now(),
            },
        )
        if updated is None:
            raise AlreadyVerifiedError()
        logger.debug(
            "Verification token stored",
            user_id=user.id,
            token_prefix=mask_token(hashed_token),
            expires_at=expires_at.isoformat(),
        )
        return updated

    async def clear_verification_token(self, user: User) -> User:
        return await self._update(
            user,
            None,
            {"email_verification_token": None, "email_verification_token_expires_at": None},
        )

    async def consume_verification_token(self, hashed_token: str) -> Optional[User]:
        """Verifies the account holding `hashed_token`, if the token is still valid.

        In one conditional update the token and its expiry are cleared, the
        digest is recorded as consumed and the account is marked verified, so
        there is no moment where the account is verified while still holding
        the token.

        Returns:
            The verified account, or `None` when no unverified account holds an
            unexpired token with this digest.
        """
        precondition = all_of(
            FieldEquals("email_verification_token", hashed_token),
            FieldAfter("email_verification_token_expires_at", self._clock.now()),
            FieldEquals("is_email_verified", False),
        )
        candidate = await self._accounts.find_one(precondition)
        if candidate is None:
            logger.info("Verification token not consumable", token_prefix=mask_token(hashed_token))
            return None

        verified = await self._accounts.update_conditional(
            candidate.id,
            precondition,
            {
                "email_verification_token": None,
                "email_verification_token_expires_at": None,
                "email_verification_consumed_token": hashed_token,
                "is_email_verified": True,
                "updated_at": utc_now(),
            },
        )
        if verified is None:
            logger.warning(
                "Verification token consumed concurrently",
                user_id=candidate.id,
                token_prefix=mask_token(hashed_token),
            )
        return verified

    # ------------------------------------------------------------------
    # Password reset token
    # ------------------------------------------------------------------

    async def set_reset_token(self, user: User, hashed_token: str, expires_at: datetime) -> User:
        """Stores a reset token digest, replacing (and so invalidating) any pending one."""
        if user.password_reset_pending:
            logger.info("Replacing pending reset token", user_id=user.id)
        return await self._update(
            user,
            None,
            {
                "forgot_password_token": hashed_token,
                "forgot_password_token_expires_at": expires_at,
            },
        )

    async def clear_reset_token(self, user: User) -> User:
        return await self._update(
            user,
            None,
            {"forgot_password_token": None, "forgot_password_token_expires_at": None},
        )

    async def consume_reset_token(self, hashed_token: str) -> Optional[User]:
        """Clears the reset token of the account holding `hashed_token`, if still valid.

        Returns:
            The account with its reset token cleared, or `None` when no account
            holds an unexpired reset token with this digest.
        """
        precondition = all_of(
            FieldEquals("forgot_password_token", hashed_token),
            FieldAfter("forgot_password_token_expires_at", self._clock.now()),
        )
        candidate = await self._accounts.find_one(precondition)
        if candidate is None:
            logger.info("Reset token not consumable", token_prefix=mask_token(hashed_token))
            return None

        consumed = await self._accounts.update_conditional(
            candidate.id,
            precondition,
            {
                "forgot_password_token": None,
                "forgot_password_token_expires_at": None,
                "updated_at": utc_now(),
            },
        )
        if consumed is None:
            logger.warning(
                "Reset token consumed concurrently",
                user_id=candidate.id,
                token_prefix=mask_token(hashed_token),
            )
        return consumed

    # ------------------------------------------------------------------
    # Refresh token
    # ------------------------------------------------------------------

    async def set_refresh_token(self, user: User, refresh_token: Optional[str]) -> User:
        """Replaces the stored refresh token wholesale; `None` ends the session."""
        digest = TokenCodec.hash(refresh_token) if refresh_token else None
        return await self._update(user, None, {"refresh_token": digest})

    async def swap_refresh_token(self, user_id: int, presented_token: str, new_token: str) -> Optional[User]:
        """Compare-and-swap of the refresh token.

        Returns:
            The updated account, or `None` if the stored digest no longer
            matches `presented_token` (another rotation or a logout won).
        """
        return await self._accounts.update_conditional(
            user_id,
            FieldEquals("refresh_token", TokenCodec.hash(presented_token)),
            {"refresh_token": TokenCodec.hash(new_token), "updated_at": utc_now()},
        )

    async def revoke_refresh_token(self, user_id: int, expected_digest: str) -> Optional[User]:
        """Clears the refresh token only if it still equals `expected_digest`."""
        return await self._accounts.update_conditional(
            user_id,
            FieldEquals("refresh_token", expected_digest),
            {"refresh_token": None, "updated_at": utc_now()},
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _update(
        self,
        user: User,
        precondition: Optional[AccountPredicate],
        patch: Dict[str, Any],
    ) -> User:
        patch = {**patch, "updated_at": utc_now()}
        updated = await self._accounts.update_conditional(user.id, precondition, patch)
        if updated is None:
            raise NotFoundError()
        return updated
