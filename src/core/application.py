"""Application factory for creating and configuring the FastAPI application.

This module provides a factory function to create a properly configured FastAPI application
with its application context, exception handlers, and routers registered.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.adapters.api.v1 import api_router
from src.core.config.settings import Settings, get_settings
from src.core.context import AppContext
from src.core.handlers import register_exception_handlers
from src.core.lifecycle import create_lifespan_manager
from src.core.logging import configure_logging


def create_application(
    settings: Optional[Settings] = None,
    context: Optional[AppContext] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to run with; loaded from the environment when omitted.
        context: A pre-built context, e.g. with test collaborators injected.
            Built from `settings` when omitted.

    Returns:
        FastAPI: The configured FastAPI application instance
    """
    if context is None:
        context = AppContext(settings or get_settings())
    settings = context.settings

    configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="First-party account and session authentication service.",
        debug=settings.DEBUG,
        lifespan=create_lifespan_manager(context),
        default_response_class=JSONResponse,
    )
    app.state.context = context

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app
