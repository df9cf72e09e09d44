from __future__ import annotations

"""Reset password route.

Consumes the reset token from the emailed link and sets the new password.
The account's session is ended, so every device has to log in again.
"""

from fastapi import APIRouter, status

from src.adapters.api.v1.auth.schemas import MessageResponse, ResetPasswordRequest
from src.infrastructure.dependency_injection.auth_dependencies import StateMachineDep

router = APIRouter()


@router.post(
    "/{token}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Reset password with a token",
    responses={400: {"description": "Token is invalid or expired"}},
)
async def reset_password(token: str, payload: ResetPasswordRequest, accounts: StateMachineDep) -> MessageResponse:
    await accounts.reset_password(token, payload.new_password)
    return MessageResponse(message="Password reset successfully")
