"""Centralized, structured exception hierarchy for Credence.

Every error raised by the account and token pipeline derives from
`CredenceError` and carries a machine-readable `code` for programmatic
handling and a human-readable `message` for logging and user feedback.

The hierarchy is designed to:
- Give each failure of the account lifecycle a stable kind.
- Map cleanly to HTTP status codes in the API layer (see `core.handlers`).
- Offer a consistent structure for logging and monitoring.
"""

from typing import Final

__all__: Final = [
    "CredenceError",
    "DuplicateIdentityError",
    "NotFoundError",
    "InvalidCredentialsError",
    "TokenInvalidOrExpiredError",
    "InvalidTokenError",
    "TokenReuseDetectedError",
    "AlreadyVerifiedError",
    "PersistenceError",
    "NotificationError",
    "TokenGenerationError",
]


class CredenceError(Exception):
    """Base exception class for all custom errors in the Credence application.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    # A concise, structured representation used by loggers & FastAPI handlers.
    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Identity errors
# ---------------------------------------------------------------------------


class DuplicateIdentityError(CredenceError):
    """Raised when a username or email is already taken.

    Maps to a `409 Conflict` HTTP status code.
    """

    def __init__(
        self,
        message: str = "User with email or username already exists",
        code: str = "duplicate_identity",
    ):
        super().__init__(message, code)


class NotFoundError(CredenceError):
    """Raised when a requested account does not exist.

    Maps to a `404 Not Found` HTTP status code.
    """

    def __init__(self, message: str = "User does not exist", code: str = "not_found"):
        super().__init__(message, code)


class InvalidCredentialsError(CredenceError):
    """Raised when a username/email and password pair does not match.

    The message is generic to prevent user enumeration. Maps to a
    `401 Unauthorized` HTTP status.
    """

    def __init__(self, message: str = "Invalid user credentials", code: str = "invalid_credentials"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Token errors
# ---------------------------------------------------------------------------


class TokenInvalidOrExpiredError(CredenceError):
    """Raised when a one-time token does not match any pending token or has expired.

    Covers email verification and password reset tokens. Maps to a
    `400 Bad Request` HTTP status.
    """

    def __init__(self, message: str = "Token is invalid or expired", code: str = "token_invalid_or_expired"):
        super().__init__(message, code)


class InvalidTokenError(TokenInvalidOrExpiredError):
    """Raised when an access or refresh token fails verification.

    Covers bad signatures, wrong token types, expired JWTs, unknown accounts and
    sessions that were ended by logout. Maps to a `401 Unauthorized`.
    """

    def __init__(self, message: str = "Invalid or expired session token", code: str = "invalid_token"):
        super().__init__(message, code)


class TokenReuseDetectedError(InvalidTokenError):
    """Raised when a refresh token that was already rotated away is presented again.

    This signals possible credential theft. Callers see the same response as for
    `InvalidTokenError`; logs and domain events keep the distinct code.
    """

    def __init__(
        self,
        message: str = "Invalid or expired session token",
        code: str = "token_reuse_detected",
    ):
        super().__init__(message, code)


class TokenGenerationError(CredenceError):
    """Raised when secure randomness cannot be obtained for a new token.

    Fatal to the current operation; maps to a `500 Internal Server Error`.
    """

    def __init__(
        self,
        message: str = "Secure random token could not be generated",
        code: str = "token_generation_error",
    ):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Account state errors
# ---------------------------------------------------------------------------


class AlreadyVerifiedError(CredenceError):
    """Raised when verification is attempted on an account that is already verified.

    Maps to a `409 Conflict` HTTP status code.
    """

    def __init__(self, message: str = "Email is already verified", code: str = "already_verified"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Collaborator errors
# ---------------------------------------------------------------------------


class PersistenceError(CredenceError):
    """Raised for low-level storage interaction errors.

    Wraps underlying database driver errors. Never retried inside the core.
    Maps to a `500 Internal Server Error` HTTP status.
    """

    def __init__(self, message: str = "Account storage failure", code: str = "persistence_error"):
        super().__init__(message, code)


class NotificationError(CredenceError):
    """Raised when a notification could not be delivered.

    Never rolls back an already committed state change; the account services
    log it and report the failed delivery to the caller.
    """

    def __init__(self, message: str = "Notification delivery failed", code: str = "notification_error"):
        super().__init__(message, code)
