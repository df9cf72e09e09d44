"""Application context: the single owner of configuration and collaborators.

`AppContext` is built from a `Settings` instance and wires the account domain
to its infrastructure: the account store (SQL or in-memory), the clock, the
randomness source, the notification renderer and sink, and the event
publisher. It is created once per process by the application factory and
stored on ``app.state.context``; request handlers reach it through
dependencies, never through module globals.

Collaborators can be injected to replace the defaults, which is how the test
suite runs the full stack with a frozen clock, a seeded random source and an
in-memory outbox.
"""

import secrets
from datetime import timedelta
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine

from src.core.config.settings import Settings
from src.domain.interfaces.infrastructure import (
    IClock,
    IEventPublisher,
    INotificationRenderer,
    INotificationSink,
)
from src.domain.interfaces.repositories import IAccountStore
from src.domain.services.auth import AccountStateMachine, CredentialStore, SessionIssuer, TokenCodec
from src.domain.services.auth.token_codec import RandomSource
from src.infrastructure.database.async_db import (
    build_engine,
    build_session_factory,
    check_database_health,
    create_db_and_tables,
)
from src.infrastructure.repositories import InMemoryAccountStore, SQLAccountStore
from src.infrastructure.services import (
    InMemoryEventPublisher,
    NotificationRenderer,
    SystemClock,
    build_notification_sink,
)
from src.utils.security import PasswordHasher

logger = structlog.get_logger(__name__)


class AppContext:
    """Holds the settings and the wired services of one running application.

    Args:
        settings: Validated application settings.
        account_store: Overrides the store selected from ``DATABASE_URL``.
        notification_sink: Overrides the sink selected from ``EMAIL_BACKEND``.
        clock: Overrides the system clock.
        random_source: Overrides ``secrets.token_bytes``.
        event_publisher: Overrides the in-memory publisher.
        renderer: Overrides the Jinja2 notification renderer.
    """

    def __init__(
        self,
        settings: Settings,
        account_store: Optional[IAccountStore] = None,
        notification_sink: Optional[INotificationSink] = None,
        clock: Optional[IClock] = None,
        random_source: Optional[RandomSource] = None,
        event_publisher: Optional[IEventPublisher] = None,
        renderer: Optional[INotificationRenderer] = None,
    ):
        self.settings = settings
        self.clock = clock or SystemClock()
        self.event_publisher = event_publisher or InMemoryEventPublisher()
        self.notification_sink = notification_sink or build_notification_sink(settings)
        self.renderer = renderer or NotificationRenderer.from_settings(settings)
        self.codec = TokenCodec(self.clock, random_source=random_source or secrets.token_bytes)
        self.password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)

        self._account_store = account_store
        self._engine: Optional[AsyncEngine] = None
        self._state_machine: Optional[AccountStateMachine] = None
        self._session_issuer: Optional[SessionIssuer] = None
        self._credentials: Optional[CredentialStore] = None

    @property
    def started(self) -> bool:
        return self._state_machine is not None

    @property
    def state_machine(self) -> AccountStateMachine:
        return self._require(self._state_machine)

    @property
    def session_issuer(self) -> SessionIssuer:
        return self._require(self._session_issuer)

    @property
    def credentials(self) -> CredentialStore:
        return self._require(self._credentials)

    @property
    def account_store(self) -> IAccountStore:
        return self._require(self._account_store)

    async def startup(self) -> None:
        """Opens the database (if any) and wires the domain services.

        Raises:
            RuntimeError: If the configured database is unreachable.
        """
        if self.started:
            return

        if self._account_store is None:
            if self.settings.uses_in_memory_store:
                logger.warning("Using in-memory account store; accounts are lost on restart")
                self._account_store = InMemoryAccountStore()
            else:
                self._account_store = await self._open_sql_store()

        self._credentials = CredentialStore(self._account_store, self.password_hasher, self.clock)
        self._session_issuer = SessionIssuer(
            self.settings,
            self._credentials,
            self.codec,
            self.clock,
            event_publisher=self.event_publisher,
        )
        self._state_machine = AccountStateMachine(
            credentials=self._credentials,
            sessions=self._session_issuer,
            codec=self.codec,
            renderer=self.renderer,
            sink=self.notification_sink,
            clock=self.clock,
            event_publisher=self.event_publisher,
            verification_token_ttl=timedelta(minutes=self.settings.EMAIL_VERIFICATION_TOKEN_EXPIRE_MINUTES),
            reset_token_ttl=timedelta(minutes=self.settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES),
            notification_timeout=self.settings.NOTIFICATION_TIMEOUT_SECONDS,
        )
        logger.info(
            "Application context started",
            env=self.settings.APP_ENV,
            store=type(self._account_store).__name__,
            email_backend=self.settings.EMAIL_BACKEND,
        )

    async def shutdown(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
        self._state_machine = None
        self._session_issuer = None
        self._credentials = None
        logger.info("Application context stopped", env=self.settings.APP_ENV)

    async def healthy(self) -> bool:
        if self._engine is None:
            return self.started
        return await check_database_health(self._engine)

    async def _open_sql_store(self) -> SQLAccountStore:
        self._engine = build_engine(self.settings)
        if self.settings.DATABASE_CREATE_TABLES:
            await create_db_and_tables(self._engine, attempts=self.settings.DATABASE_CONNECT_RETRIES)
        elif not await check_database_health(self._engine):
            logger.error("Database unavailable on startup")
            raise RuntimeError("Database unavailable")
        return SQLAccountStore(build_session_factory(self._engine))

    @staticmethod
    def _require(service):
        if service is None:
            raise RuntimeError("AppContext has not been started")
        return service
