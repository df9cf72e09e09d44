from __future__ import annotations

"""/auth/register route module.

Creates an unverified account and sends its verification email. The response
tells the caller whether the email went out; a failed delivery does not undo
the registration.
"""

import structlog
from fastapi import APIRouter, status

from src.adapters.api.v1.auth.schemas import RegisterRequest, RegisterResponse, UserOut
from src.core.logging import mask_email
from src.infrastructure.dependency_injection.auth_dependencies import StateMachineDep

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["auth"],
    summary="Register a new user",
    description="Creates a new, unverified user account and emails a verification link.",
    responses={409: {"description": "Username or email already registered"}},
)
async def register_user(payload: RegisterRequest, accounts: StateMachineDep) -> RegisterResponse:
    logger.info("Registration request received", email=mask_email(payload.email))
    result = await accounts.register(payload.username, payload.email, payload.password)
    return RegisterResponse(
        user=UserOut.from_entity(result.user),
        notification_delivered=result.notification.delivered,
        error_code=result.notification.error_code,
    )
