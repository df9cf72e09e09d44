from __future__ import annotations

"""Composite response Pydantic models for authentication endpoints."""

from typing import Optional

from pydantic import BaseModel

from src.adapters.api.v1.auth.schemas.responses.token import TokenPair
from src.adapters.api.v1.auth.schemas.responses.user import UserOut


class AuthResponse(BaseModel):
    """Response returned by the login endpoint."""

    user: UserOut
    tokens: TokenPair


class RegisterResponse(BaseModel):
    """Response returned by the register endpoint.

    No session is started at registration; the user logs in separately.
    """

    user: UserOut
    notification_delivered: bool
    error_code: Optional[str] = None
