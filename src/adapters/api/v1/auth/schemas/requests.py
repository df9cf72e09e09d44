from __future__ import annotations

"""Request‐payload Pydantic models for authentication endpoints."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, constr, model_validator

# ---------------------------------------------------------------------------
# Shared / primitive types ---------------------------------------------------
# ---------------------------------------------------------------------------

UsernameStr = constr(strip_whitespace=True, min_length=3, max_length=13, pattern=r"^[A-Za-z0-9_]+$")
PasswordStr = constr(strip_whitespace=True, min_length=8, max_length=128)

# ---------------------------------------------------------------------------
# Concrete request models ----------------------------------------------------
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Payload expected by ``POST /auth/register``."""

    username: UsernameStr = Field(..., examples=["alice"])
    email: EmailStr = Field(..., examples=["alice@example.com"])
    password: PasswordStr = Field(..., examples=["Passw0rd!"])


class LoginRequest(BaseModel):
    """Payload expected by ``POST /auth/login``; either identity field may be used."""

    username: Optional[str] = Field(default=None, examples=["alice"])
    email: Optional[EmailStr] = Field(default=None, examples=["alice@example.com"])
    password: str = Field(..., min_length=1, examples=["Passw0rd!"])

    @model_validator(mode="after")
    def _require_identity(self) -> "LoginRequest":
        if not (self.username or self.email):
            raise ValueError("Either username or email is required")
        return self

    @property
    def identity(self) -> str:
        return self.email or self.username


class RefreshTokenRequest(BaseModel):
    """Payload expected by ``POST /auth/refresh-access-token``."""

    refresh_token: str = Field(..., min_length=1, examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."])


class ChangePasswordRequest(BaseModel):
    """Payload expected by ``POST /auth/change-password``."""

    old_password: str = Field(
        ..., min_length=1, examples=["OldPass123!"], description="Current password for verification"
    )
    new_password: PasswordStr = Field(..., examples=["NewPass456!"])


class ForgotPasswordRequest(BaseModel):
    """Payload expected by ``POST /auth/forgot-password``."""

    email: EmailStr = Field(
        ...,
        examples=["alice@example.com"],
        description="Email address to send password reset instructions to",
    )


class ResetPasswordRequest(BaseModel):
    """Payload expected by ``POST /auth/reset-password/{token}``."""

    new_password: PasswordStr = Field(..., examples=["NewSecurePass123!"])
