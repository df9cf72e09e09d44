"""Repository interfaces for abstracting data persistence in the domain layer.

This module defines the persistence "port" used by the domain. The account
store is deliberately document-shaped: a handful of find operations, a create
and a conditional update. Any storage engine with conditional-update support
can implement it; the concrete adapters live in the `infrastructure` layer.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from src.domain.entities.user import User
from src.domain.value_objects.predicates import AccountPredicate


class IAccountStore(ABC):
    """An interface defining the contract for account persistence operations.

    Implementations must guarantee that `update_conditional` evaluates its
    precondition and applies its patch as one atomic step for the given
    account; every credential transition in the domain relies on it.

    Storage failures are raised as `PersistenceError`; unique constraint
    violations on username or email as `DuplicateIdentityError`.
    """

    @abstractmethod
    async def find_one(self, predicate: AccountPredicate) -> Optional[User]:
        """Returns the first account matching `predicate`, or `None`."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[User]:
        """Returns the account with the given primary key, or `None`."""
        raise NotImplementedError

    @abstractmethod
    async def create(self, fields: Mapping[str, Any]) -> User:
        """Persists a new account built from `fields`.

        Returns:
            The stored account, with its assigned `id`.

        Raises:
            DuplicateIdentityError: If the username or email is already taken.
        """
        raise NotImplementedError

    @abstractmethod
    async def update_conditional(
        self,
        user_id: int,
        precondition: Optional[AccountPredicate],
        patch: Mapping[str, Any],
    ) -> Optional[User]:
        """Applies `patch` to the account if it currently satisfies `precondition`.

        Args:
            user_id: Primary key of the account to update.
            precondition: Condition that must hold at write time; `None` means
                the update is unconditional.
            patch: Field names and their new values.

        Returns:
            The updated account, or `None` if the account does not exist or
            the precondition did not hold. In that case nothing was written.
        """
        raise NotImplementedError
