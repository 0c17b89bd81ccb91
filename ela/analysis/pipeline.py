"""Pipeline orchestration — fingerprint, summarize, knowledge-base lookup."""

from __future__ import annotations

from dataclasses import dataclass

from ela.analysis.fingerprint import UNKNOWN_FINGERPRINT, Fingerprinter
from ela.core.types import AnalysisResult, Event, Suggestion, SuggestionSource
from ela.kb.base import KnowledgeBase
from ela.summarize.base import Summarizer

KB_SUGGESTION_SCORE = 0.7


@dataclass(frozen=True)
class PipelineDeps:
    fingerprinter: Fingerprinter
    summarizer: Summarizer
    kb: KnowledgeBase


async def run_pipeline(events: list[Event], deps: PipelineDeps) -> AnalysisResult:
    """Run the stages in order over one batch; stage errors propagate.

    The batch is fingerprinted by its first event only.
    """
    fingerprint = deps.fingerprinter.fingerprint(events[0]) if events else UNKNOWN_FINGERPRINT

    summary = await deps.summarizer.describe(events)

    kb_items = await deps.kb.lookup(summary.text)
    suggestions = [
        Suggestion(
            title=item.pattern,
            fix=item.fix,
            source=SuggestionSource.KB,
            score=KB_SUGGESTION_SCORE,
        )
        for item in kb_items
    ]

    return AnalysisResult(
        fingerprint=fingerprint,
        summary=summary.text,
        suggestions=suggestions,
        events=list(events),
        analysis=summary.analysis,
    )
