import pytest

from src.core.context import AppContext
from src.infrastructure.repositories import InMemoryAccountStore
from src.infrastructure.services import InMemoryNotificationSink
from tests.utils.config import build_test_settings


def test_services_are_unavailable_before_startup():
    context = AppContext(build_test_settings())

    assert not context.started
    with pytest.raises(RuntimeError):
        context.state_machine


@pytest.mark.asyncio
async def test_startup_selects_in_memory_collaborators_from_settings():
    context = AppContext(build_test_settings())

    await context.startup()

    assert context.started
    assert isinstance(context.account_store, InMemoryAccountStore)
    assert isinstance(context.notification_sink, InMemoryNotificationSink)
    assert await context.healthy()

    await context.shutdown()
    assert not context.started


@pytest.mark.asyncio
async def test_injected_store_is_shared_by_services():
    store = InMemoryAccountStore()
    context = AppContext(build_test_settings(), account_store=store)
    await context.startup()

    result = await context.state_machine.register("alice", "alice@x.com", "Passw0rd!")

    assert (await store.find_by_id(result.user.id)).username == "alice"
    assert (await context.credentials.find_by_id(result.user.id)) is not None
    await context.shutdown()


@pytest.mark.asyncio
async def test_startup_fails_when_database_is_unreachable(mocker):
    settings = build_test_settings(
        DATABASE_URL="postgresql+asyncpg://u:p@db.invalid:5432/credence",
        DATABASE_CREATE_TABLES=False,
    )
    mocker.patch("src.core.context.build_engine")
    mocker.patch("src.core.context.check_database_health", return_value=False)
    context = AppContext(settings)

    with pytest.raises(RuntimeError):
        await context.startup()
