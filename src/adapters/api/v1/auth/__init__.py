from __future__ import annotations

"""Authentication router package – bundles the account lifecycle endpoints."""

from fastapi import APIRouter

from .routes import change_password as change_password_route
from .routes import current_user as current_user_route
from .routes import forgot_password as forgot_password_route
from .routes import login as login_route
from .routes import logout as logout_route
from .routes import refresh_access_token as refresh_access_token_route
from .routes import register as register_route
from .routes import resend_email_verification as resend_email_verification_route
from .routes import reset_password as reset_password_route
from .routes import verify_email as verify_email_route

router = APIRouter(prefix="/auth", tags=["auth"])

# Delegate to sub-routers ----------------------------------------------------

router.include_router(register_route.router, prefix="/register")
router.include_router(login_route.router, prefix="/login")
router.include_router(logout_route.router, prefix="/logout")
router.include_router(current_user_route.router, prefix="/current-user")
router.include_router(verify_email_route.router, prefix="/verify-email")
router.include_router(resend_email_verification_route.router, prefix="/resend-email-verification")
router.include_router(refresh_access_token_route.router, prefix="/refresh-access-token")
router.include_router(change_password_route.router, prefix="/change-password")
router.include_router(forgot_password_route.router, prefix="/forgot-password")
router.include_router(reset_password_route.router, prefix="/reset-password")

__all__ = ["router"]
