"""Shared fixtures.

Every fixture wires the real domain services to in-memory collaborators: a
frozen clock, a seeded random source, the dict-backed account store, the
outbox notification sink and the in-memory event publisher. Nothing here
touches a database, an SMTP server or the wall clock.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.core.application import create_application
from src.core.context import AppContext
from src.domain.services.auth import AccountStateMachine, CredentialStore, SessionIssuer, TokenCodec
from src.infrastructure.repositories import InMemoryAccountStore
from src.infrastructure.services import (
    InMemoryEventPublisher,
    InMemoryNotificationSink,
    NotificationRenderer,
)
from src.utils.security import PasswordHasher
from tests.utils.config import build_test_settings
from tests.utils.fakes import FrozenClock, seeded_random_source


@pytest.fixture
def settings():
    return build_test_settings()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def random_source():
    return seeded_random_source()


@pytest.fixture
def account_store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def sink() -> InMemoryNotificationSink:
    return InMemoryNotificationSink()


@pytest.fixture
def event_publisher() -> InMemoryEventPublisher:
    return InMemoryEventPublisher()


@pytest.fixture
def password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def codec(clock, random_source) -> TokenCodec:
    return TokenCodec(clock, random_source=random_source)


@pytest.fixture
def renderer(settings) -> NotificationRenderer:
    return NotificationRenderer.from_settings(settings)


@pytest.fixture
def credentials(account_store, password_hasher, clock) -> CredentialStore:
    return CredentialStore(account_store, password_hasher, clock)


@pytest.fixture
def session_issuer(settings, credentials, codec, clock, event_publisher) -> SessionIssuer:
    return SessionIssuer(settings, credentials, codec, clock, event_publisher=event_publisher)


@pytest.fixture
def state_machine(
    credentials, session_issuer, codec, renderer, sink, clock, event_publisher
) -> AccountStateMachine:
    return AccountStateMachine(
        credentials=credentials,
        sessions=session_issuer,
        codec=codec,
        renderer=renderer,
        sink=sink,
        clock=clock,
        event_publisher=event_publisher,
        notification_timeout=1.0,
    )


@pytest_asyncio.fixture
async def app_context(settings, account_store, sink, clock, random_source, event_publisher):
    context = AppContext(
        settings,
        account_store=account_store,
        notification_sink=sink,
        clock=clock,
        random_source=random_source,
        event_publisher=event_publisher,
    )
    await context.startup()
    yield context
    await context.shutdown()


@pytest.fixture
def app(app_context):
    return create_application(context=app_context)


@pytest_asyncio.fixture
async def async_client(app):
    # The context is already started by its fixture; ASGITransport does not
    # run the lifespan.
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
