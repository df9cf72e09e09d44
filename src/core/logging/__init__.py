"""
Logging configuration module for structured logging.

This module configures the application's logging system using structlog.
It provides structured logging capabilities with JSON formatting for production
and human-readable console output for development.

The logging configuration includes:
- Timestamp formatting
- Log level inclusion and filtering
- JSON/Console output based on settings
- Context management
- Logger caching
"""

import logging

import structlog


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configures the application's logging system.

    This function sets up structlog with:
    1. ISO format timestamps
    2. Log level inclusion
    3. JSON formatting for production (json_logs=True)
    4. Console formatting for development
    5. Level filtering based on log_level
    6. Logger caching for performance

    Args:
        log_level: Minimum level name, e.g. "INFO" or "DEBUG".
        json_logs: Render events as JSON instead of colored console lines.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", level=level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )


def mask_email(email: str | None) -> str:
    """Masks an email address for logging, keeping the first three characters."""
    if not email or "@" not in email:
        return "unknown"
    local, domain = email.split("@", 1)
    return f"{local[:3]}***@{domain}"


def mask_token(token: str | None) -> str | None:
    """Returns an 8-character prefix of a token, safe to log."""
    if not token:
        return None
    return f"{token[:8]}..."


# Module-level logger for code that has no more specific name
logger = structlog.get_logger()
