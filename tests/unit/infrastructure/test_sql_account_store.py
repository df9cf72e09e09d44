from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from src.core.exceptions import DuplicateIdentityError, PersistenceError
from src.domain.value_objects.predicates import FieldEquals
from src.infrastructure.repositories import SQLAccountStore
from tests.factories import create_fake_user


@pytest.fixture
def db_session():
    session = MagicMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def store(db_session):
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=db_session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return SQLAccountStore(factory)


@pytest.mark.asyncio
async def test_find_one_returns_first_match(store, db_session):
    user = create_fake_user(id=1)
    result = MagicMock()
    result.scalars.return_value.first.return_value = user
    db_session.execute.return_value = result

    found = await store.find_one(FieldEquals("username", user.username))

    assert found is user
    statement = db_session.execute.call_args.args[0]
    assert "users.username" in str(statement)


@pytest.mark.asyncio
async def test_find_by_id_uses_primary_key(store, db_session):
    user = create_fake_user(id=7)
    db_session.get.return_value = user

    assert await store.find_by_id(7) is user
    assert db_session.get.call_args.args[1] == 7


@pytest.mark.asyncio
async def test_create_commits_and_refreshes(store, db_session):
    user = await store.create({"username": "alice", "email": "alice@x.com", "hashed_password": "hash"})

    db_session.add.assert_called_once_with(user)
    db_session.commit.assert_awaited_once()
    db_session.refresh.assert_awaited_once_with(user)


@pytest.mark.asyncio
async def test_create_maps_unique_violation(store, db_session):
    db_session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

    with pytest.raises(DuplicateIdentityError):
        await store.create({"username": "alice", "email": "alice@x.com", "hashed_password": "hash"})


@pytest.mark.asyncio
async def test_driver_errors_become_persistence_errors(store, db_session):
    db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))

    with pytest.raises(PersistenceError):
        await store.find_one(FieldEquals("username", "alice"))


@pytest.mark.asyncio
async def test_update_conditional_commits_when_one_row_matches(store, db_session):
    updated = create_fake_user(id=3, refresh_token="new")
    db_session.execute.return_value = MagicMock(rowcount=1)
    db_session.get.return_value = updated

    result = await store.update_conditional(3, FieldEquals("refresh_token", "old"), {"refresh_token": "new"})

    assert result is updated
    db_session.commit.assert_awaited_once()
    sql = str(db_session.execute.call_args.args[0])
    assert sql.startswith("UPDATE users SET")
    assert "users.refresh_token" in sql
    assert db_session.get.call_args.kwargs == {"populate_existing": True}


@pytest.mark.asyncio
async def test_update_conditional_rolls_back_when_precondition_fails(store, db_session):
    db_session.execute.return_value = MagicMock(rowcount=0)

    result = await store.update_conditional(3, FieldEquals("refresh_token", "old"), {"refresh_token": "new"})

    assert result is None
    db_session.rollback.assert_awaited_once()
    db_session.commit.assert_not_awaited()
