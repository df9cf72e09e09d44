from __future__ import annotations

"""Response Pydantic model for user data."""

from datetime import datetime

from pydantic import BaseModel

from src.domain.entities.user import AccountState, User


class UserOut(BaseModel):
    """Serialised representation of :class:`~src.domain.entities.user.User`.

    Credential fields (password hash, token digests) are never part of it.
    """

    id: int
    username: str
    email: str
    is_email_verified: bool
    state: AccountState
    created_at: datetime

    @classmethod
    def from_entity(cls, user: User) -> "UserOut":
        return cls(state=user.state, **user.public_view())

    model_config = {
        "from_attributes": True
    }
