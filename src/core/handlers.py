"""
Global exception handlers for the FastAPI application.

This module contains centralized handlers for the account domain exceptions,
translating them into HTTP responses. Domain services only raise; the status
code of each error kind is decided here, once.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status
from structlog import get_logger

from src.core.exceptions import (
    AlreadyVerifiedError,
    CredenceError,
    DuplicateIdentityError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    PersistenceError,
    TokenGenerationError,
    TokenInvalidOrExpiredError,
    TokenReuseDetectedError,
)

__all__ = [
    "duplicate_identity_error_handler",
    "not_found_error_handler",
    "invalid_credentials_error_handler",
    "token_invalid_or_expired_error_handler",
    "invalid_token_error_handler",
    "token_reuse_detected_error_handler",
    "already_verified_error_handler",
    "internal_error_handler",
    "credence_error_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def _error_body(exc: CredenceError) -> dict:
    return {"detail": exc.message, "code": exc.code}


async def duplicate_identity_error_handler(request: Request, exc: DuplicateIdentityError) -> JSONResponse:
    """Handles `DuplicateIdentityError`, returning a `409 Conflict`.

    This is triggered when a registration attempt is made with a username or
    email that already exists in the system.
    """
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=_error_body(exc))


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handles `NotFoundError`, returning a `404 Not Found`."""
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=_error_body(exc))


async def invalid_credentials_error_handler(request: Request, exc: InvalidCredentialsError) -> JSONResponse:
    """Handles `InvalidCredentialsError`, returning a `401 Unauthorized`.

    The body never says whether the identity or the password was wrong.
    """
    logger.warning(
        "Authentication failure",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=_error_body(exc),
        headers=_BEARER_CHALLENGE,
    )


async def token_invalid_or_expired_error_handler(
    request: Request, exc: TokenInvalidOrExpiredError
) -> JSONResponse:
    """Handles `TokenInvalidOrExpiredError` for one-time tokens, returning a `400 Bad Request`."""
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_body(exc))


async def invalid_token_error_handler(request: Request, exc: InvalidTokenError) -> JSONResponse:
    """Handles `InvalidTokenError` for session tokens, returning a `401 Unauthorized`."""
    logger.info("Session token rejected", error=exc.code, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=_error_body(exc),
        headers=_BEARER_CHALLENGE,
    )


async def token_reuse_detected_error_handler(request: Request, exc: TokenReuseDetectedError) -> JSONResponse:
    """Handles `TokenReuseDetectedError`.

    The caller gets exactly the response of `InvalidTokenError`; only the log
    line carries the distinct code.
    """
    logger.warning(
        "Refresh token reuse rejected",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=_error_body(InvalidTokenError()),
        headers=_BEARER_CHALLENGE,
    )


async def already_verified_error_handler(request: Request, exc: AlreadyVerifiedError) -> JSONResponse:
    """Handles `AlreadyVerifiedError`, returning a `409 Conflict`."""
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=_error_body(exc))


async def internal_error_handler(request: Request, exc: CredenceError) -> JSONResponse:
    """Handles `PersistenceError` and `TokenGenerationError`, returning a `500`.

    The underlying cause is logged; the body stays generic.
    """
    logger.error(
        "Internal failure",
        error=exc.code,
        cause=repr(exc.__cause__) if exc.__cause__ else None,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "code": exc.code},
    )


async def credence_error_handler(request: Request, exc: CredenceError) -> JSONResponse:
    """Handles any other `CredenceError`, returning a `400 Bad Request`."""
    logger.warning("Unhandled domain error", error=exc.code, path=request.url.path)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_body(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Registers all custom exception handlers with the FastAPI application.

    Starlette resolves handlers along the exception's MRO, so every subclass
    with a different response is registered explicitly.

    Args:
        app: The `FastAPI` application instance.
    """
    app.add_exception_handler(DuplicateIdentityError, duplicate_identity_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(InvalidCredentialsError, invalid_credentials_error_handler)
    app.add_exception_handler(TokenInvalidOrExpiredError, token_invalid_or_expired_error_handler)
    app.add_exception_handler(InvalidTokenError, invalid_token_error_handler)
    app.add_exception_handler(TokenReuseDetectedError, token_reuse_detected_error_handler)
    app.add_exception_handler(AlreadyVerifiedError, already_verified_error_handler)
    app.add_exception_handler(PersistenceError, internal_error_handler)
    app.add_exception_handler(TokenGenerationError, internal_error_handler)
    app.add_exception_handler(CredenceError, credence_error_handler)
