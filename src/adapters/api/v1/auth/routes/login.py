"""Login endpoint module.

Authenticates a user by username or email and password and starts a session.
Accounts that have not verified their email yet may log in; the verification
state is part of the returned user.
"""

import structlog
from fastapi import APIRouter, status

from src.adapters.api.v1.auth.schemas import AuthResponse, LoginRequest, TokenPair, UserOut
from src.infrastructure.dependency_injection.auth_dependencies import StateMachineDep

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Authenticate a user",
    description="Authenticates with username or email and password and returns an access/refresh token pair.",
    responses={401: {"description": "Invalid user credentials"}},
)
async def login_user(payload: LoginRequest, accounts: StateMachineDep) -> AuthResponse:
    """Authenticate a user and start a session.

    Any refresh token issued by an earlier login of the same account stops
    working: an account holds a single refresh chain.

    Args:
        payload (LoginRequest): Identity and password from the request body
        accounts (AccountStateMachine): Account lifecycle service

    Returns:
        AuthResponse: User details and session tokens
    """
    result = await accounts.login(payload.identity, payload.password)
    logger.info("Login succeeded", user_id=result.user.id, email_verified=result.user.is_email_verified)
    return AuthResponse(user=UserOut.from_entity(result.user), tokens=TokenPair.from_session(result.tokens))
