from __future__ import annotations

"""Response Pydantic model for token data."""

from pydantic import BaseModel

from src.domain.value_objects.session_tokens import SessionTokens


class TokenPair(BaseModel):
    """JWT access & refresh tokens with additional metadata."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # Access token expiration time in seconds

    @classmethod
    def from_session(cls, tokens: SessionTokens) -> "TokenPair":
        return cls(**tokens.as_response())
