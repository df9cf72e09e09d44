"""In-memory implementation of the account persistence port.

Used by the test suite and when the application runs with
``DATABASE_URL=memory://``. Rows are kept as plain dicts and every read returns
a fresh `User`, so callers can never mutate stored state by accident; the only
way to change an account is `update_conditional`.
"""

import asyncio
from typing import Any, Dict, Mapping, Optional

from structlog import get_logger

from src.core.exceptions import DuplicateIdentityError, PersistenceError
from src.domain.entities.user import User
from src.domain.interfaces.repositories import IAccountStore
from src.domain.value_objects.predicates import AccountPredicate

logger = get_logger(__name__)

_UNIQUE_FIELDS = ("username", "email")


class InMemoryAccountStore(IAccountStore):
    """Dict-backed account store; an `asyncio.Lock` serializes every write."""

    def __init__(self):
        self._rows: Dict[int, Dict[str, Any]] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def find_one(self, predicate: AccountPredicate) -> Optional[User]:
        for user_id in sorted(self._rows):
            user = self._load(user_id)
            if predicate.matches(user):
                return user
        return None

    async def find_by_id(self, user_id: int) -> Optional[User]:
        if user_id not in self._rows:
            return None
        return self._load(user_id)

    async def create(self, fields: Mapping[str, Any]) -> User:
        async with self._lock:
            self._check_unique(fields, exclude_id=None)
            user_id = self._next_id
            user = User(**{**fields, "id": user_id})
            self._rows[user_id] = user.model_dump()
            self._next_id += 1
            logger.debug("Account row inserted", user_id=user_id)
            return self._load(user_id)

    async def update_conditional(
        self,
        user_id: int,
        precondition: Optional[AccountPredicate],
        patch: Mapping[str, Any],
    ) -> Optional[User]:
        async with self._lock:
            if user_id not in self._rows:
                return None
            if precondition is not None and not precondition.matches(self._load(user_id)):
                logger.debug("Conditional update skipped, precondition failed", user_id=user_id)
                return None

            unknown = set(patch) - set(self._rows[user_id])
            if unknown:
                raise PersistenceError(f"Unknown account fields: {', '.join(sorted(unknown))}")
            self._check_unique(patch, exclude_id=user_id)
            self._rows[user_id].update(patch)
            return self._load(user_id)

    def __len__(self) -> int:
        return len(self._rows)

    def _load(self, user_id: int) -> User:
        return User(**self._rows[user_id])

    def _check_unique(self, fields: Mapping[str, Any], exclude_id: Optional[int]) -> None:
        for field in _UNIQUE_FIELDS:
            value = fields.get(field)
            if value is None:
                continue
            for row_id, row in self._rows.items():
                if row_id != exclude_id and row[field] == value:
                    logger.info("Unique constraint violated", field=field)
                    raise DuplicateIdentityError()
