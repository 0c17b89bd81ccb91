"""Structured logging setup using structlog.

Two streams are configured: the root logger (console or JSON on stderr) and
the ``incident_log`` logger that :class:`~ela.sinks.log.LogSink` writes to,
which can additionally be written as JSON lines to its own file.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

import structlog

from ela.core.config import get_settings

INCIDENT_LOGGER = "incident_log"

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _formatter(renderer: structlog.types.Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def setup_logging(
    level: str | None = None,
    fmt: str | None = None,
    extra_handlers: Sequence[logging.Handler] = (),
) -> None:
    """Configure structlog with JSON or console renderer.

    Args:
        level: Log level override (e.g. "DEBUG"). Uses config if None.
        fmt: Renderer format override ("json" or "console"). Uses config if None.
        extra_handlers: Handlers attached to the root logger alongside the
            stderr handler, e.g. an :class:`~ela.adapters.AnalyzerHandler`.
            Root handlers are replaced on every call, so pass them here.
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.logging.level).upper(), logging.INFO)
    log_format = fmt or settings.logging.format

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_formatter(renderer))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(console)
    for handler in extra_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    incident_logger = logging.getLogger(INCIDENT_LOGGER)
    for handler in list(incident_logger.handlers):
        incident_logger.removeHandler(handler)
        handler.close()
    if settings.logging.incident_file:
        file_handler = logging.FileHandler(settings.logging.incident_file, encoding="utf-8")
        file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
        incident_logger.addHandler(file_handler)
