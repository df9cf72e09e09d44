"""Session token value objects."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True)
class SessionTokens:
    """Access and refresh token issued together at login or on rotation.

    Attributes:
        access_token: Signed, stateless bearer credential.
        refresh_token: Bearer credential whose digest is stored on the account.
        expires_in: Access token lifetime in seconds.
    """

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"

    def as_response(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
            "expires_in": self.expires_in,
        }

    def __repr__(self) -> str:
        return f"SessionTokens(token_type='{self.token_type}', expires_in={self.expires_in})"


@dataclass(frozen=True)
class TokenClaims:
    """Verified claims of an access or refresh token."""

    user_id: int
    token_type: str
    jti: str
    issued_at: datetime
    expires_at: datetime
