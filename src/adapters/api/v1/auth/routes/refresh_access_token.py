"""Refresh route: exchanges the current refresh token for a new token pair.

Each refresh token can be exchanged once. Presenting a refresh token that was
already exchanged is rejected exactly like an invalid one; the server logs
it as possible token theft.
"""

from fastapi import APIRouter, status

from src.adapters.api.v1.auth.schemas import RefreshTokenRequest, TokenPair
from src.infrastructure.dependency_injection.auth_dependencies import StateMachineDep

router = APIRouter()


@router.post(
    "",
    response_model=TokenPair,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Rotate the refresh token",
    responses={401: {"description": "Invalid or expired session token"}},
)
async def refresh_access_token(payload: RefreshTokenRequest, accounts: StateMachineDep) -> TokenPair:
    tokens = await accounts.refresh(payload.refresh_token)
    return TokenPair.from_session(tokens)
