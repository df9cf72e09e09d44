from __future__ import annotations

# FastAPI & typing
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Project imports
from src.core.exceptions import InvalidTokenError
from src.domain.entities.user import User
from src.infrastructure.dependency_injection.auth_dependencies import SessionIssuerDep

__all__ = [
    "get_bearer_token",
    "get_current_user",
    "CurrentUser",
]


# ---------------------------------------------------------------------------
# Type-annotated dependency shortcuts
# ---------------------------------------------------------------------------

bearer_scheme = HTTPBearer(auto_error=False)
BearerCredentials = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]


# ---------------------------------------------------------------------------
# Public dependencies
# ---------------------------------------------------------------------------


def get_bearer_token(credentials: BearerCredentials) -> str:
    """Return the raw access token from the ``Authorization: Bearer`` header.

    A missing header is reported like any other invalid token so the global
    handler shapes the 401 response.
    """
    if credentials is None or not credentials.credentials:
        raise InvalidTokenError()
    return credentials.credentials


async def get_current_user(  # noqa: D401
    token: Annotated[str, Depends(get_bearer_token)],
    sessions: SessionIssuerDep,
) -> User:
    """Return the authenticated :class:`~src.domain.entities.user.User`.

    Verifies the access token's signature, type and expiry and loads the
    account it names.
    """
    return await sessions.authenticate(token)


CurrentUser = Annotated[User, Depends(get_current_user)]
