"""Structured logging for the keys server.

Every module logs through structlog with keyword context::

    logger = get_logger(__name__)
    logger.info("Key config loaded", path=path, ssh_keys=3)

Events are JSON lines in production and coloured console lines during
development. Request-scoped values (``request_id``, ``method``, ``path``) are
bound with ``bind_request_context()`` and merged into every event logged while
that request is served.

Importing this module configures nothing; ``keyserver.main`` calls
``configure_logging()`` at import and the lifespan calls it again once settings
are known. Loggers are not cached, so module-level loggers pick up the new
level immediately.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from structlog.types import Processor


def build_processors(json_output: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structlog for the whole process.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Unknown names fall
                   back to INFO; settings validation rejects them earlier.
        json_output: JSON lines if True, console rendering otherwise.
    """
    structlog.configure(
        processors=build_processors(json_output),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = "keyserver") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# ─── Request context ──────────────────────────────────────────────────────────


def bind_request_context(request_id: str, **context: Any) -> None:
    """Start a fresh logging context for one request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, **context)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


# ─── Timing ───────────────────────────────────────────────────────────────────


@contextmanager
def log_duration(
    operation: str,
    logger: Optional[structlog.stdlib.BoundLogger] = None,
    **context: Any,
) -> Iterator[None]:
    """Log ``"<operation> completed"`` or ``"<operation> failed"`` with its duration.

    Exceptions, including SystemExit from the config loaders, are logged at
    ERROR and re-raised unchanged.
    """
    logger = logger or get_logger()
    start = time.perf_counter()
    try:
        yield
    except BaseException as exc:
        logger.error(
            f"{operation} failed",
            duration_ms=round((time.perf_counter() - start) * 1000, 3),
            error=str(exc) or type(exc).__name__,
            **context,
        )
        raise
    logger.info(
        f"{operation} completed",
        duration_ms=round((time.perf_counter() - start) * 1000, 3),
        **context,
    )

