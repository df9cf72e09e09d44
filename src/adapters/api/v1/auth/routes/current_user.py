"""Current user route: returns the account named by the bearer access token."""

from fastapi import APIRouter, status

from src.adapters.api.v1.auth.schemas import UserOut
from src.core.dependencies.auth import CurrentUser

router = APIRouter()


@router.get(
    "",
    response_model=UserOut,
    status_code=status.HTTP_200_OK,
    tags=["auth"],
    summary="Get the authenticated user",
)
async def get_current_user_profile(current_user: CurrentUser) -> UserOut:
    return UserOut.from_entity(current_user)
