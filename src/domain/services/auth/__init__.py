from .account_state_machine import AccountStateMachine, LoginResult, RegistrationResult
from .credential_store import CredentialStore
from .session_issuer import SessionIssuer
from .token_codec import TokenCodec

__all__ = [
    "AccountStateMachine",
    "CredentialStore",
    "LoginResult",
    "RegistrationResult",
    "SessionIssuer",
    "TokenCodec",
]
