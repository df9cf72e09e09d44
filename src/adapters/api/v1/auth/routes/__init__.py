from __future__ import annotations

"""Subpackage aggregating individual auth route modules."""

__all__ = [
    "register",
    "login",
    "logout",
    "current_user",
    "verify_email",
    "resend_email_verification",
    "refresh_access_token",
    "change_password",
    "forgot_password",
    "reset_password",
]
