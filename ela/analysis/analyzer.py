"""Analyzer — ingestion entry point and concurrent sink fan-out."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from types import TracebackType

import structlog

from ela.analysis.exceptions import SinkPublishError
from ela.analysis.fingerprint import Fingerprinter, FirstTokenFingerprinter
from ela.analysis.pipeline import PipelineDeps, run_pipeline
from ela.core.types import AnalysisResult, Event
from ela.kb.base import KnowledgeBase, SafeKnowledgeBase, StaticKnowledgeBase
from ela.sinks.base import Sink
from ela.sinks.log import LogSink
from ela.summarize.base import RuleSummarizer, Summarizer

logger = structlog.stdlib.get_logger()


def _degrading(kb: KnowledgeBase) -> KnowledgeBase:
    return kb if isinstance(kb, SafeKnowledgeBase) else SafeKnowledgeBase(kb)


@dataclass(frozen=True)
class SinkOutcome:
    """Result of publishing to one sink."""

    sink: str
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class IngestReport:
    """Analysis result plus what each sink did with it."""

    result: AnalysisResult
    outcomes: list[SinkOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)

    @property
    def failures(self) -> list[SinkOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def raise_for_failures(self) -> None:
        """Raise :class:`SinkPublishError` if any sink failed."""
        failed = [(o.sink, o.error) for o in self.outcomes if o.error is not None]
        if failed:
            raise SinkPublishError(failed)


class Analyzer:
    """Runs the pipeline for each event and publishes to every sink.

    - Pipeline failures propagate out of :meth:`ingest`; knowledge-base
      lookup failures only drop the KB suggestions.
    - Sinks run concurrently; every sink is awaited and its outcome reported,
      so one failing sink never hides the others.
    - :meth:`try_ingest` is the adapter-facing variant that never raises.

    Usage::

        async with Analyzer(summarizer=summarizer, sinks=[LogSink()]) as analyzer:
            report = await analyzer.ingest(event)
    """

    def __init__(
        self,
        fingerprinter: Fingerprinter | None = None,
        summarizer: Summarizer | None = None,
        kb: KnowledgeBase | None = None,
        sinks: list[Sink] | None = None,
    ) -> None:
        self._deps = PipelineDeps(
            fingerprinter=fingerprinter or FirstTokenFingerprinter(),
            summarizer=summarizer or RuleSummarizer(),
            kb=_degrading(kb or StaticKnowledgeBase()),
        )
        self._sinks: list[Sink] = [LogSink()] if sinks is None else list(sinks)

    @property
    def sinks(self) -> list[Sink]:
        return list(self._sinks)

    async def ingest(self, event: Event) -> IngestReport:
        """Analyze one event and fan the result out to all sinks."""
        result = await run_pipeline([event], self._deps)
        outcomes = await self._publish(result)
        report = IngestReport(result=result, outcomes=outcomes)
        for failure in report.failures:
            logger.error(
                "sink_publish_failed",
                sink=failure.sink,
                fingerprint=result.fingerprint,
                error=repr(failure.error),
            )
        return report

    async def try_ingest(self, event: Event) -> IngestReport | None:
        """Like :meth:`ingest` but logs pipeline failures and returns None."""
        try:
            return await self.ingest(event)
        except Exception:
            logger.exception("ingest_failed", message=event.message[:120])
            return None

    async def _publish(self, result: AnalysisResult) -> list[SinkOutcome]:
        errors = await asyncio.gather(
            *(sink.publish(result) for sink in self._sinks),
            return_exceptions=True,
        )
        return [
            SinkOutcome(
                sink=sink.name,
                error=err if isinstance(err, BaseException) else None,
            )
            for sink, err in zip(self._sinks, errors)
        ]

    # ── Lifecycle ───────────────────────────────────────────────

    async def close(self) -> None:
        resources = [self._deps.summarizer, self._deps.kb, *self._sinks]
        for resource in resources:
            try:
                await resource.close()
            except Exception:
                logger.exception("analyzer_close_error", resource=type(resource).__name__)

    async def __aenter__(self) -> Analyzer:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
