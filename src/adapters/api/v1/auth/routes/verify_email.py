from __future__ import annotations

"""Email verification route.

The link sent at registration (or on resend) points here. The token in the
path is consumed on success; presenting it again reports that the email is
already verified.
"""

from fastapi import APIRouter, status

from src.adapters.api.v1.auth.schemas import UserOut
from src.infrastructure.dependency_injection.auth_dependencies import StateMachineDep

router = APIRouter()


@router.get(
    "/{token}",
    response_model=UserOut,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Verify an email address",
    responses={
        400: {"description": "Token is invalid or expired"},
        409: {"description": "Email is already verified"},
    },
)
async def verify_email(token: str, accounts: StateMachineDep) -> UserOut:
    user = await accounts.verify(token)
    return UserOut.from_entity(user)
