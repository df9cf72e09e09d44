"""Domain Services for the Account bounded context.

- TokenCodec: one-time token generation and hashing
- CredentialStore: conditional writes of the credential fields of an account
- SessionIssuer: access/refresh token issuing, verification and rotation
- AccountStateMachine: legal transitions of the account lifecycle
"""

from .auth import (
    AccountStateMachine,
    CredentialStore,
    LoginResult,
    RegistrationResult,
    SessionIssuer,
    TokenCodec,
)

__all__ = [
    "AccountStateMachine",
    "CredentialStore",
    "LoginResult",
    "RegistrationResult",
    "SessionIssuer",
    "TokenCodec",
]
