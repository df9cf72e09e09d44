from datetime import datetime, timezone  # For timestamp fields
from enum import Enum  # For type-safe state enumeration
from typing import Optional  # For optional fields

from sqlalchemy import DateTime  # For explicit timezone-aware DateTime columns
from sqlmodel import Column, Field, SQLModel, String  # For ORM and table definition

# Columns that hold credentials; never serialized into API responses or logs.
CREDENTIAL_FIELDS = frozenset(
    {
        "hashed_password",
        "email_verification_token",
        "email_verification_token_expires_at",
        "email_verification_consumed_token",
        "forgot_password_token",
        "forgot_password_token_expires_at",
        "refresh_token",
    }
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AccountState(str, Enum):
    """Verification state of an account.

    Password reset is an orthogonal flag (`User.password_reset_pending`), not a
    state of its own: a reset can be pending for verified and unverified
    accounts alike.

    Attributes:
        UNVERIFIED: Registered, email address not yet confirmed.
        VERIFIED: Email address confirmed with a verification token.
    """

    UNVERIFIED = "unverified"
    VERIFIED = "verified"


class User(SQLModel, table=True):
    """Represents a user account and acts as the Aggregate Root of the auth context.

    The account exclusively owns its credential fields: the password hash, the
    pending email verification token, the pending password reset token and the
    hash of the current refresh token. Every token stored here is a one-way
    digest; the unhashed values only ever travel to the user.

    Attributes:
        id: The unique identifier for the user (primary key).
        username: A unique, lower-cased username.
        email: A unique, lower-cased email address.
        hashed_password: The bcrypt hash of the password.
        is_email_verified: Whether the email address has been confirmed.
        email_verification_token: sha256 digest of the pending verification token.
        email_verification_token_expires_at: Expiry of the pending verification token.
        email_verification_consumed_token: sha256 digest of the token that
            verified the account, kept so a replayed link reports "already
            verified" instead of "invalid".
        forgot_password_token: sha256 digest of the pending password reset token.
        forgot_password_token_expires_at: Expiry of the pending reset token.
        refresh_token: sha256 digest of the single active refresh token.
        created_at: When the account was created.
        updated_at: When the account was last modified.
    """

    __tablename__ = "users"  # Explicit table name for clarity

    id: Optional[int] = Field(
        default=None,  # Auto-incremented by database
        primary_key=True,
        description="The unique identifier for the user.",
    )
    username: str = Field(
        sa_column=Column(String(50), unique=True, index=True, nullable=False),
        description="Unique, lower-cased username.",
    )
    email: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False),
        description="Unique, lower-cased email address.",
    )
    hashed_password: str = Field(
        max_length=255,  # Sufficient for bcrypt hashes
        description="Bcrypt-hashed password.",
    )
    is_email_verified: bool = Field(
        default=False,
        description="Indicates if the user's email has been verified.",
    )
    email_verification_token: Optional[str] = Field(
        default=None,
        max_length=64,  # sha256 hex digest
        index=True,
    )
    email_verification_token_expires_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    email_verification_consumed_token: Optional[str] = Field(
        default=None,
        max_length=64,
        index=True,
    )
    forgot_password_token: Optional[str] = Field(
        default=None,
        max_length=64,
        index=True,
    )
    forgot_password_token_expires_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    refresh_token: Optional[str] = Field(
        default=None,
        max_length=64,
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )

    @property
    def state(self) -> AccountState:
        return AccountState.VERIFIED if self.is_email_verified else AccountState.UNVERIFIED

    @property
    def password_reset_pending(self) -> bool:
        return self.forgot_password_token is not None

    @property
    def has_active_session(self) -> bool:
        return self.refresh_token is not None

    def public_view(self) -> dict:
        """Account fields that are safe to return to the account owner."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "is_email_verified": self.is_email_verified,
            "created_at": self.created_at,
        }
