"""structlog setup and the two helpers the service logs through.

Events go through the stdlib ``logging`` tree so uvicorn and SQLAlchemy
records share the same renderer: JSON lines normally, coloured console output
when ``DEBUG`` is on.
"""

import logging
import sys
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import Processor

from user_service.config import settings

_SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.format_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _select_renderer() -> Processor:
    if settings.debug:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def configure_logging() -> None:
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_select_renderer(),
            foreign_pre_chain=_SHARED_PROCESSORS,
        )
    )
    logging.basicConfig(handlers=[handler], level=logging.DEBUG if settings.debug else logging.INFO)


def get_logger(name: str | None = None) -> BoundLogger:
    return structlog.get_logger(name)


@asynccontextmanager
async def async_log_timing(
    operation: str,
    logger: BoundLogger,
    **context: Any,
) -> AsyncIterator[dict[str, Any]]:
    """Log ``"<operation> completed"`` at debug level with ``duration_ms``.

    Keys the caller adds to the yielded dict are logged alongside ``context``.
    """
    start = time.perf_counter()
    extra: dict[str, Any] = {}
    try:
        yield extra
    finally:
        extra["duration_ms"] = round((time.perf_counter() - start) * 1000, 2)
        logger.debug(f"{operation} completed", operation=operation, **context, **extra)


def log_exception(logger: BoundLogger, exc: BaseException, event: str, **extra: Any) -> None:
    """Log ``exc`` at error level with its traceback and type."""
    logger.error(event, exc_info=exc, error=str(exc), error_type=type(exc).__name__, **extra)
