"""Account predicates for lookups and conditional updates.

Predicates are small immutable value objects describing a condition on the
fields of a `User`. The persistence port accepts them both as lookup filters
(`find_one`) and as preconditions of a conditional update
(`update_conditional`), so a condition such as "this token hash is stored and
has not expired" is checked atomically with the write that depends on it.

Adapters interpret predicates in two ways:
- `matches(user)` evaluates the predicate against an in-memory entity.
- `to_clause(model)` builds the equivalent SQLAlchemy boolean expression.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Tuple

from sqlalchemy import and_, false, or_, true


class AccountPredicate:
    """Base class of all account predicates."""

    def matches(self, user: Any) -> bool:
        raise NotImplementedError

    def to_clause(self, model: Any):
        raise NotImplementedError

    def __and__(self, other: "AccountPredicate") -> "AllOf":
        return AllOf((self, other))

    def __or__(self, other: "AccountPredicate") -> "AnyOf":
        return AnyOf((self, other))


@dataclass(frozen=True)
class FieldEquals(AccountPredicate):
    """`field == value`. A `None` value never matches; use `FieldIsNull` for that."""

    field: str
    value: Any

    def matches(self, user: Any) -> bool:
        if self.value is None:
            return False
        return getattr(user, self.field) == self.value

    def to_clause(self, model: Any):
        if self.value is None:
            return false()
        return getattr(model, self.field) == self.value


@dataclass(frozen=True)
class FieldAfter(AccountPredicate):
    """`field > moment`, strictly. A missing timestamp never matches."""

    field: str
    moment: datetime

    def matches(self, user: Any) -> bool:
        current = getattr(user, self.field)
        return current is not None and current > self.moment

    def to_clause(self, model: Any):
        column = getattr(model, self.field)
        return and_(column.is_not(None), column > self.moment)


@dataclass(frozen=True)
class FieldIsNull(AccountPredicate):
    """`field IS NULL`."""

    field: str

    def matches(self, user: Any) -> bool:
        return getattr(user, self.field) is None

    def to_clause(self, model: Any):
        return getattr(model, self.field).is_(None)


@dataclass(frozen=True)
class AllOf(AccountPredicate):
    """Conjunction; an empty conjunction always matches."""

    predicates: Tuple[AccountPredicate, ...]

    def matches(self, user: Any) -> bool:
        return all(predicate.matches(user) for predicate in self.predicates)

    def to_clause(self, model: Any):
        if not self.predicates:
            return true()
        return and_(*(predicate.to_clause(model) for predicate in self.predicates))


@dataclass(frozen=True)
class AnyOf(AccountPredicate):
    """Disjunction; an empty disjunction never matches."""

    predicates: Tuple[AccountPredicate, ...]

    def matches(self, user: Any) -> bool:
        return any(predicate.matches(user) for predicate in self.predicates)

    def to_clause(self, model: Any):
        if not self.predicates:
            return false()
        return or_(*(predicate.to_clause(model) for predicate in self.predicates))


def all_of(*predicates: AccountPredicate) -> AllOf:
    return AllOf(tuple(predicates))


def any_of(*predicates: AccountPredicate) -> AnyOf:
    return AnyOf(tuple(predicates))
