"""Summarizer backed by an external text-generation oracle.

Each call redacts and truncates the events, builds one prompt, invokes the
oracle under a per-attempt timeout with retry/backoff, then normalizes the
untrusted response and renders it into the narrative layout.
"""

from __future__ import annotations

import abc
import asyncio

import structlog

from ela.core.config import SummarizerConfig
from ela.core.types import Event, IncidentAnalysis, Summary
from ela.summarize.base import Summarizer
from ela.summarize.exceptions import OracleTimeoutError
from ela.summarize.narrative import render_narrative
from ela.summarize.normalize import normalize_response
from ela.summarize.prompt import build_prompt
from ela.summarize.retry import SleepFn, with_retries

logger = structlog.stdlib.get_logger()


class OracleClient(abc.ABC):
    """Sends one prompt to a text generator and returns its raw answer."""

    @abc.abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the oracle's free-text response."""

    async def close(self) -> None:
        """Release network resources. No-op by default."""


class OracleSummarizer(Summarizer):
    """Resilient summarizer wrapping an :class:`OracleClient`.

    Usage::

        client = GeminiClient(config)
        summarizer = OracleSummarizer(client, config)
        summary = await summarizer.describe(events)
    """

    def __init__(
        self,
        client: OracleClient,
        config: SummarizerConfig | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        cfg = config or SummarizerConfig()
        self._client = client
        self._stack_lines = max(0, cfg.include_stack_lines)
        self._max_retries = max(0, cfg.max_retries)
        self._timeout_secs = cfg.timeout_secs
        self._backoff_base_secs = cfg.backoff_base_secs
        self._sleep = sleep

    async def summarize(self, events: list[Event]) -> str:
        return (await self.describe(events)).text

    async def describe(self, events: list[Event]) -> Summary:
        analysis = await self.analyze(events)
        return Summary(text=render_narrative(analysis), analysis=analysis)

    async def analyze(self, events: list[Event]) -> IncidentAnalysis:
        """Run the oracle and return the normalized structured analysis."""
        prompt = build_prompt(events, stack_lines=self._stack_lines)
        raw = await with_retries(
            lambda: self._generate_with_deadline(prompt),
            retries=self._max_retries,
            base_delay=self._backoff_base_secs,
            sleep=self._sleep,
        )
        analysis = normalize_response(raw.strip(), events)
        logger.info(
            "oracle_analysis_ready",
            events=len(events),
            level=analysis.error_level,
            priority=analysis.priority,
            confidence=analysis.confidence,
        )
        return analysis

    async def _generate_with_deadline(self, prompt: str) -> str:
        try:
            return await asyncio.wait_for(self._client.generate(prompt), self._timeout_secs)
        except asyncio.TimeoutError as exc:
            raise OracleTimeoutError(
                f"oracle did not answer within {self._timeout_secs:g}s"
            ) from exc

    async def close(self) -> None:
        await self._client.close()
