"""Exception hierarchy for analysis orchestration."""

from __future__ import annotations


class AnalysisError(Exception):
    """Base exception for analyzer errors."""


class SinkPublishError(AnalysisError):
    """One or more sinks failed to publish a result.

    ``failures`` holds ``(sink_name, error)`` pairs in sink order; names can
    repeat when several sinks share a type.
    """

    def __init__(self, failures: list[tuple[str, BaseException]]) -> None:
        self.failures = failures
        names = ", ".join(name for name, _ in failures)
        super().__init__(f"{len(failures)} sink(s) failed to publish: {names}")
