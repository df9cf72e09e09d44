from __future__ import annotations

"""Forgot password route.

Emails a single-use reset link. Requesting again invalidates the previous
link. The verification state of the account is not affected.
"""

from fastapi import APIRouter, status
from structlog import get_logger

from src.adapters.api.v1.auth.schemas import ForgotPasswordRequest, NotificationResponse
from src.core.logging import mask_email
from src.infrastructure.dependency_injection.auth_dependencies import StateMachineDep

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=NotificationResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Request password reset",
    responses={404: {"description": "No account uses this email"}},
)
async def forgot_password(payload: ForgotPasswordRequest, accounts: StateMachineDep) -> NotificationResponse:
    logger.info("Password reset request received", email=mask_email(payload.email))
    outcome = await accounts.request_password_reset(payload.email)
    return NotificationResponse(
        message="Password reset email has been sent",
        notification_delivered=outcome.delivered,
        error_code=outcome.error_code,
    )
