from __future__ import annotations

"""Logout route: ends the session of the bearer of the access token.

The stored refresh token is cleared, so no refresh token issued before the
logout can be rotated afterwards. Access tokens are stateless and stay valid
until they expire.
"""

from fastapi import APIRouter, status
from structlog import get_logger

from src.adapters.api.v1.auth.schemas import MessageResponse
from src.core.dependencies.auth import CurrentUser
from src.infrastructure.dependency_injection.auth_dependencies import StateMachineDep

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Logout current user",
    responses={401: {"description": "Missing, invalid or expired access token"}},
)
async def logout_user(current_user: CurrentUser, accounts: StateMachineDep) -> MessageResponse:
    await accounts.logout(current_user)
    logger.info("Logout request completed", user_id=current_user.id)
    return MessageResponse(message="User logged out successfully")
