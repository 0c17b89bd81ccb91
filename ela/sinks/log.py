"""Default sink — one structured log record per analysis."""

from __future__ import annotations

import structlog

from ela.core.logging import INCIDENT_LOGGER
from ela.core.types import AnalysisResult
from ela.sinks.base import Sink

# Routed to its own file when logging.incident_file is set.
incident_logger = structlog.get_logger(INCIDENT_LOGGER)


class LogSink(Sink):
    """Logs the fingerprint, summary and primary fix of each result."""

    async def publish(self, result: AnalysisResult) -> None:
        primary = result.primary_suggestion
        incident_logger.info(
            "incident_analyzed",
            fingerprint=result.fingerprint,
            summary=result.summary,
            suggested_fix=primary.fix if primary and primary.fix else None,
            suggestions=len(result.suggestions),
            events=len(result.events),
        )
