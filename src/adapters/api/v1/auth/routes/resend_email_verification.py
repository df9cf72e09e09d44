from __future__ import annotations

"""Resend email verification route.

Replaces the pending verification token of the authenticated user and emails
the new one. Verified accounts are rejected before any token is minted.
"""

from fastapi import APIRouter, status
from structlog import get_logger

from src.adapters.api.v1.auth.schemas import NotificationResponse
from src.core.dependencies.auth import CurrentUser
from src.infrastructure.dependency_injection.auth_dependencies import StateMachineDep

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=NotificationResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Resend the verification email",
    responses={409: {"description": "Email is already verified"}},
)
async def resend_email_verification(current_user: CurrentUser, accounts: StateMachineDep) -> NotificationResponse:
    outcome = await accounts.resend_verification(current_user)
    logger.info("Verification email resent", user_id=current_user.id, delivered=outcome.delivered)
    return NotificationResponse(
        message="Verification email has been sent",
        notification_delivered=outcome.delivered,
        error_code=outcome.error_code,
    )
