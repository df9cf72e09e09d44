from __future__ import annotations

"""Authentication API schemas package.

Request models, response models and small acknowledgment envelopes live in
separate modules; everything is re-exported here so routes import from
``src.adapters.api.v1.auth.schemas``.
"""

# flake8: noqa: F401 – re-export

from .misc import MessageResponse, NotificationResponse
from .requests import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    PasswordStr,
    RefreshTokenRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UsernameStr,
)
from .responses.auth import AuthResponse, RegisterResponse
from .responses.token import TokenPair
from .responses.user import UserOut

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "RefreshTokenRequest",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "UsernameStr",
    "PasswordStr",
    "UserOut",
    "TokenPair",
    "AuthResponse",
    "RegisterResponse",
    "MessageResponse",
    "NotificationResponse",
]
