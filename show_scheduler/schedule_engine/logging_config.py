"""Structured logging configuration (structlog)."""
import logging
import sys

import structlog

from schedule_engine.config import get_settings

# Chatty third-party loggers and the level they run at unless SQL echo is on.
_QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}


def configure_logging() -> None:
    """
    structlog for engine events (publish.*, upload.*, snapshot.*...), stdlib logging for
    uvicorn/SQLAlchemy. JSON lines outside APP_ENV=local.
    """
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.app_env == "local"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(levelname)s %(name)s %(message)s", stream=sys.stdout, level=level)
    for name, quiet_level in _QUIET_LOGGERS.items():
        if name == "sqlalchemy.engine" and settings.sql_echo:
            continue
        logging.getLogger(name).setLevel(max(level, quiet_level))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
