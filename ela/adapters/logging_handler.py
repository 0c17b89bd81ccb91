"""stdlib ``logging`` adapter: feeds log records into an analyzer."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import structlog

from ela.analysis.analyzer import Analyzer, IngestReport
from ela.core.logging import INCIDENT_LOGGER
from ela.core.types import Event, Level, json_safe

logger = structlog.stdlib.get_logger()

_LEVEL_MAP: dict[int, Level] = {
    logging.DEBUG: Level.DEBUG,
    logging.INFO: Level.INFO,
    logging.WARNING: Level.WARN,
    logging.ERROR: Level.ERROR,
    logging.CRITICAL: Level.FATAL,
}

# LogRecord attributes that are not user-supplied ``extra`` fields.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}

# Keys structlog adds that the event already carries elsewhere.
_STRUCTLOG_KEYS = ("level", "timestamp", "logger", "stack")


def level_from_record(levelno: int) -> Level:
    """Closest event level at or below *levelno*."""
    for threshold in sorted(_LEVEL_MAP, reverse=True):
        if levelno >= threshold:
            return _LEVEL_MAP[threshold]
    return Level.TRACE


def _structlog_fields(record: logging.LogRecord) -> dict[str, Any] | None:
    """Event dict of a record emitted through ``ProcessorFormatter.wrap_for_formatter``."""
    return dict(record.msg) if isinstance(record.msg, dict) else None


def event_from_record(record: logging.LogRecord, service: str | None = None) -> Event:
    """Map a ``LogRecord`` onto the normalized event shape.

    Records from structlog carry their event dict as ``msg``: its ``event``
    key is the message, ``exception`` the formatted traceback, and the
    remaining keys are merged into ``meta``.
    """
    fields = _structlog_fields(record)
    if fields is not None:
        message = str(fields.pop("event", ""))
        stack = fields.pop("exception", None)
        for key in _STRUCTLOG_KEYS:
            fields.pop(key, None)
    else:
        message = record.getMessage()
        stack = None
        fields = {}

    stack = stack or record.exc_text
    if not stack and record.exc_info:
        stack = logging.Formatter().formatException(record.exc_info)
    if not stack and record.stack_info:
        stack = record.stack_info

    meta = {
        key: json_safe(value)
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }
    meta.update((key, json_safe(value)) for key, value in fields.items())
    return Event(
        timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
        level=level_from_record(record.levelno),
        message=message,
        service=service,
        logger="logging",
        module=record.name,
        line=record.lineno,
        stack=stack or None,
        meta=meta,
    )


class AnalyzerHandler(logging.Handler):
    """Schedules analysis of each record on the running event loop.

    Ingestion is fire-and-forget: failures are logged and the report is
    discarded, never raised back into the logging call. Records emitted
    with no running loop are dropped.

    Records from this package's own loggers are ignored to avoid feedback.

    Usage::

        handler = AnalyzerHandler(analyzer, service="checkout", level=logging.ERROR)
        logging.getLogger().addHandler(handler)
    """

    def __init__(
        self,
        analyzer: Analyzer,
        service: str | None = None,
        level: int = logging.ERROR,
    ) -> None:
        super().__init__(level=level)
        self._analyzer = analyzer
        self._service = service
        self._pending: set[asyncio.Task[IngestReport | None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.split(".", 1)[0] in ("ela", INCIDENT_LOGGER):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("analyzer_handler_no_loop", logger_name=record.name)
            return
        try:
            event = event_from_record(record, self._service)
        except Exception:
            self.handleError(record)
            return

        task = loop.create_task(self._analyzer.try_ingest(event))
        self._pending.add(task)
        task.add_done_callback(self._discard)

    def _discard(self, task: asyncio.Task[IngestReport | None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        report = task.result()
        if report is not None and not report.ok:
            logger.warning(
                "analyzer_handler_sink_failures",
                failed=[o.sink for o in report.failures],
            )

    async def drain(self) -> None:
        """Wait for all scheduled ingestions to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
