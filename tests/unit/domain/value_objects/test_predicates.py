from datetime import timedelta

from sqlalchemy.dialects import postgresql

from src.domain.entities.user import User
from src.domain.value_objects.predicates import (
    AllOf,
    AnyOf,
    FieldAfter,
    FieldEquals,
    FieldIsNull,
    all_of,
    any_of,
)
from tests.factories import create_fake_user
from tests.utils.fakes import FROZEN_AT


def _compile(clause) -> str:
    return str(clause.compile(dialect=postgresql.dialect()))


def test_field_equals_matches_value():
    user = create_fake_user(username="alice")

    assert FieldEquals("username", "alice").matches(user)
    assert not FieldEquals("username", "bob").matches(user)


def test_field_equals_none_never_matches():
    user = create_fake_user(refresh_token=None)

    assert not FieldEquals("refresh_token", None).matches(user)
    assert FieldIsNull("refresh_token").matches(user)


def test_field_after_is_strict():
    user = create_fake_user()
    user.email_verification_token_expires_at = FROZEN_AT

    assert FieldAfter("email_verification_token_expires_at", FROZEN_AT - timedelta(microseconds=1)).matches(user)
    assert not FieldAfter("email_verification_token_expires_at", FROZEN_AT).matches(user)


def test_field_after_missing_timestamp_never_matches():
    user = create_fake_user()

    assert not FieldAfter("forgot_password_token_expires_at", FROZEN_AT).matches(user)


def test_combinators():
    user = create_fake_user(username="alice", email="alice@x.com")

    assert all_of(FieldEquals("username", "alice"), FieldEquals("email", "alice@x.com")).matches(user)
    assert not all_of(FieldEquals("username", "alice"), FieldEquals("email", "bob@x.com")).matches(user)
    assert any_of(FieldEquals("username", "bob"), FieldEquals("email", "alice@x.com")).matches(user)
    assert (FieldEquals("username", "bob") | FieldEquals("username", "alice")).matches(user)
    assert not (FieldEquals("username", "bob") & FieldEquals("username", "alice")).matches(user)


def test_empty_combinators():
    user = create_fake_user()

    assert AllOf(()).matches(user)
    assert not AnyOf(()).matches(user)


def test_to_clause_renders_sql_conditions():
    predicate = all_of(
        FieldEquals("forgot_password_token", "abc"),
        FieldAfter("forgot_password_token_expires_at", FROZEN_AT),
    )

    sql = _compile(predicate.to_clause(User))

    assert "users.forgot_password_token = " in sql
    assert "users.forgot_password_token_expires_at IS NOT NULL" in sql
    assert "users.forgot_password_token_expires_at >" in sql


def test_to_clause_of_any_of_uses_or():
    predicate = any_of(FieldEquals("username", "alice"), FieldEquals("email", "alice"))

    sql = _compile(predicate.to_clause(User))

    assert " OR " in sql


def test_to_clause_of_null_and_none():
    assert "IS NULL" in _compile(FieldIsNull("refresh_token").to_clause(User))
    assert _compile(FieldEquals("refresh_token", None).to_clause(User)) == "false"
