"""Structured logging configuration using structlog.

``configure_logging`` sets up the structlog processor chain and routes the
stdlib root logger through the same chain, so records from uvicorn, alembic
and SQLAlchemy come out in the same shape as application logs: JSON in
production, a readable console format when ``DEBUG`` is on.
"""

from __future__ import annotations

import logging
import sys

import structlog

# uvicorn's access logger duplicates AccessLogMiddleware
_SILENCED_LOGGERS = ("uvicorn.access",)


def configure_logging(*, json_logs: bool = True, log_level: str = "INFO") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        json_logs: When *True* (default / production), render logs as JSON.
            When *False* (development), use a colourful console renderer.
        log_level: Root log level name (e.g. ``"INFO"``, ``"DEBUG"``).
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *([structlog.processors.format_exc_info] if json_logs else []),
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())

    # Let uvicorn's loggers propagate to the root handler instead of their own
    for name in ("uvicorn", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    for name in _SILENCED_LOGGERS:
        logging.getLogger(name).disabled = True
