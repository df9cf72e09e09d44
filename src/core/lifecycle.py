"""Application lifecycle management.

This module handles application startup and shutdown events, ensuring proper
initialization and cleanup of the application context.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from structlog import get_logger

from src.core.context import AppContext

logger = get_logger(__name__)


def create_lifespan_manager(context: AppContext):
    """Create the application lifespan manager.

    Args:
        context: The context to start on startup and stop on shutdown.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Starts the context before serving and stops it afterwards.

        Raises:
            RuntimeError: If the database is unavailable during startup
        """
        await context.startup()
        logger.info("application_startup", env=context.settings.APP_ENV, version=context.settings.VERSION)

        yield

        await context.shutdown()
        logger.info("application_shutdown", env=context.settings.APP_ENV)

    return lifespan
