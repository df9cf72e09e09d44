from __future__ import annotations

"""Change password route for an authenticated user.

Requires the current password. The session stays active.
"""

from fastapi import APIRouter, status
from structlog import get_logger

from src.adapters.api.v1.auth.schemas import ChangePasswordRequest, MessageResponse
from src.core.dependencies.auth import CurrentUser
from src.infrastructure.dependency_injection.auth_dependencies import StateMachineDep

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Change password",
    responses={401: {"description": "Invalid access token or wrong current password"}},
)
async def change_password(
    payload: ChangePasswordRequest,
    current_user: CurrentUser,
    accounts: StateMachineDep,
) -> MessageResponse:
    await accounts.change_password(current_user, payload.old_password, payload.new_password)
    logger.info("Password changed", user_id=current_user.id)
    return MessageResponse(message="Password changed successfully")
