"""
Asynchronous Database Utilities Module

This module builds the SQLAlchemy asyncio engine and session factory used by
`SQLAccountStore`. Nothing here runs at import time: the application context
calls these helpers during startup with the active `Settings`, and disposes of
the engine on shutdown.

**Security Note**: Ensure that the database connection URL (DATABASE_URL) is configured for SSL/TLS when
connecting over untrusted networks to prevent data interception (OWASP A02:2021 - Cryptographic Failures).
asyncpg does not accept 'sslmode' in connect_args; it is stripped from the URL here and SSL must be
configured through the driver instead. Avoid logging connection details.

Key Components:
    - build_async_url: Normalizes a configured URL to the asyncpg driver.
    - build_engine: The asynchronous SQLAlchemy engine.
    - build_session_factory: A factory for creating asynchronous database sessions.
    - create_db_and_tables: Creates tables, retrying while the database comes up.
    - check_database_health: Runs a trivial query against the engine.
"""

import urllib.parse as urlparse

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from structlog import get_logger
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.core.config.database import DatabaseSettings

logger = get_logger(__name__)


def build_async_url(database_url: str) -> str:
    """
    Build the asynchronous database URL with proper handling of SSL parameters.

    This function replaces a synchronous psycopg2 driver with asyncpg and removes
    query parameters like sslmode, which asyncpg handles differently.

    Returns:
        str: The cleaned asynchronous database URL.
    """
    async_url = database_url.replace("postgresql+psycopg2", "postgresql+asyncpg")
    if async_url.startswith("postgresql://"):
        async_url = async_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if not async_url.startswith("postgresql"):
        return async_url
    parsed = urlparse.urlparse(async_url)
    query = dict(urlparse.parse_qsl(parsed.query))
    query.pop("sslmode", None)
    parsed = parsed._replace(query=urlparse.urlencode(query))
    return urlparse.urlunparse(parsed)


def build_engine(settings: DatabaseSettings) -> AsyncEngine:
    url = build_async_url(settings.DATABASE_URL)
    options = {"echo": settings.DATABASE_ECHO, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.POSTGRES_POOL_SIZE,
            max_overflow=settings.POSTGRES_MAX_OVERFLOW,
            pool_timeout=settings.POSTGRES_POOL_TIMEOUT,
        )
    return create_async_engine(url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def create_db_and_tables(engine: AsyncEngine, attempts: int = 3) -> None:
    """
    Create tables using the async engine.

    Connection failures are retried with exponential backoff; any other error,
    or exhausting the attempts, propagates to the caller.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max(attempts, 1)),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((OperationalError, OSError)),
        reraise=True,
    ):
        with attempt:
            logger.info("Creating database tables", attempt=attempt.retry_state.attempt_number)
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables created")


async def check_database_health(engine: AsyncEngine) -> bool:
    """Returns whether a trivial query succeeds."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (OperationalError, OSError) as e:
        logger.error("Database health check failed", error=str(e), error_type=type(e).__name__)
        return False
