"""SQLAlchemy implementation of the account persistence port.

Every call opens its own `AsyncSession` from the injected factory and commits
before returning, so the domain never sees a session or a transaction.

Conditional updates are issued as a single statement::

    UPDATE users SET ... WHERE id = :id AND <precondition>

and the affected row count decides whether the precondition held. The check
and the write are therefore atomic on the database side, which is what refresh
token rotation and one-time token consumption rely on.
"""

from typing import Any, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from src.core.exceptions import DuplicateIdentityError, PersistenceError
from src.domain.entities.user import User
from src.domain.interfaces.repositories import IAccountStore
from src.domain.value_objects.predicates import AccountPredicate

logger = get_logger(__name__)


class SQLAccountStore(IAccountStore):
    """Account store backed by a relational database through SQLAlchemy.

    Args:
        session_factory: Factory producing `AsyncSession` objects bound to the
            application engine (see `infrastructure.database.async_db`).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_one(self, predicate: AccountPredicate) -> Optional[User]:
        statement = select(User).where(predicate.to_clause(User)).order_by(User.id).limit(1)
        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                return result.scalars().first()
        except SQLAlchemyError as e:
            self._log_failure("find_one", e)
            raise PersistenceError() from e

    async def find_by_id(self, user_id: int) -> Optional[User]:
        try:
            async with self._session_factory() as session:
                return await session.get(User, user_id)
        except SQLAlchemyError as e:
            self._log_failure("find_by_id", e, user_id=user_id)
            raise PersistenceError() from e

    async def create(self, fields: Mapping[str, Any]) -> User:
        user = User(**fields)
        try:
            async with self._session_factory() as session:
                session.add(user)
                await session.commit()
                await session.refresh(user)
        except IntegrityError as e:
            logger.info("Account insert rejected by unique constraint", error_type=type(e).__name__)
            raise DuplicateIdentityError() from e
        except SQLAlchemyError as e:
            self._log_failure("create", e)
            raise PersistenceError() from e

        logger.debug("Account row inserted", user_id=user.id)
        return user

    async def update_conditional(
        self,
        user_id: int,
        precondition: Optional[AccountPredicate],
        patch: Mapping[str, Any],
    ) -> Optional[User]:
        conditions = [User.id == user_id]
        if precondition is not None:
            conditions.append(precondition.to_clause(User))
        statement = (
            update(User)
            .where(*conditions)
            .values(**patch)
            .execution_options(synchronize_session=False)
        )

        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                if result.rowcount != 1:
                    await session.rollback()
                    logger.debug("Conditional update matched no row", user_id=user_id)
                    return None
                await session.commit()
                return await session.get(User, user_id, populate_existing=True)
        except IntegrityError as e:
            logger.info("Account update rejected by unique constraint", user_id=user_id)
            raise DuplicateIdentityError() from e
        except SQLAlchemyError as e:
            self._log_failure("update_conditional", e, user_id=user_id)
            raise PersistenceError() from e

    @staticmethod
    def _log_failure(operation: str, error: Exception, **context: Any) -> None:
        logger.error(
            "Account store operation failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **context,
        )
