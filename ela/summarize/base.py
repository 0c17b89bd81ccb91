"""Summarizer contract and the rule-based default."""

from __future__ import annotations

import abc

from ela.core.types import Event, Summary


class Summarizer(abc.ABC):
    """Turns a batch of events into a narrative analysis."""

    @abc.abstractmethod
    async def summarize(self, events: list[Event]) -> str:
        """Return the narrative for *events*."""

    async def describe(self, events: list[Event]) -> Summary:
        """Narrative plus structure; summarizers without structure return text only."""
        return Summary(text=await self.summarize(events))

    async def close(self) -> None:
        """Release long-lived clients. No-op by default."""


class RuleSummarizer(Summarizer):
    """Condenses a batch to its first message, truncated to *max_chars*."""

    def __init__(self, max_chars: int = 120) -> None:
        self._max_chars = max_chars

    async def summarize(self, events: list[Event]) -> str:
        if not events:
            return "No events"
        return events[0].message[: self._max_chars] or "Event"
