"""Sink contract — consumers of analysis results."""

from __future__ import annotations

import abc

from ela.core.types import AnalysisResult


class SinkError(Exception):
    """Base exception for sink errors."""


class Sink(abc.ABC):
    """Receives every analysis result. Must not mutate it."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abc.abstractmethod
    async def publish(self, result: AnalysisResult) -> None:
        """Deliver *result*; raise on failure."""

    async def close(self) -> None:
        """Release resources. No-op by default."""
