"""
Structured logging setup.

JSON logs in production, colored console logs while developing. Every
request carries a correlation ID so a scan can be followed from the upload
through recognition to the stored scan log.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.types import Processor

from platelog.core.config import get_settings

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Libraries that log chatty request/connection details at INFO
NOISY_LOGGERS = ("uvicorn", "uvicorn.access", "sqlalchemy.engine", "httpx", "openai")


def get_correlation_id() -> str:
    """Return the correlation ID bound to the current request context."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Bind a correlation ID to the current request context.

    Args:
        correlation_id: ID received from the caller. A new UUID4 is
            generated when None or empty.

    Returns:
        str: The correlation ID now in effect.
    """
    cid = correlation_id or str(uuid.uuid4())
    correlation_id_var.set(cid)
    return cid


def add_correlation_id(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that stamps the correlation ID onto each event."""
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def drop_color_message_key(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Drop uvicorn's duplicated ``color_message`` field."""
    event_dict.pop("color_message", None)
    return event_dict


def setup_logging() -> None:
    """
    Configure structlog and the standard library root logger.

    Log level and renderer come from settings (``LOG_LEVEL``,
    ``LOG_FORMAT``). Third-party loggers are capped at WARNING.
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_correlation_id,
        drop_color_message_key,
    ]

    if settings.log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            # Thai plate and province text must stay readable in the log files
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("scan_recorded", plate="1กข1234", employee_id=3)
    """
    return structlog.get_logger(name)
