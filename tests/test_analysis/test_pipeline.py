"""Tests for run_pipeline: stage ordering, fingerprint policy, KB mapping."""

from __future__ import annotations

import pytest

from ela.analysis.fingerprint import Fingerprinter, FirstTokenFingerprinter
from ela.analysis.pipeline import KB_SUGGESTION_SCORE, PipelineDeps, run_pipeline
from ela.core.types import (
    AnalysisLevel,
    Event,
    IncidentAnalysis,
    KBItem,
    Priority,
    Summary,
    SuggestionSource,
)
from ela.kb.base import KnowledgeBase, StaticKnowledgeBase
from ela.summarize.base import RuleSummarizer, Summarizer


class RecordingFingerprinter(Fingerprinter):
    def __init__(self) -> None:
        self.seen: list[Event] = []

    def fingerprint(self, event: Event) -> str:
        self.seen.append(event)
        return f"fp:{event.message}"


class RecordingKnowledgeBase(KnowledgeBase):
    def __init__(self, items: list[KBItem] | None = None) -> None:
        self.queries: list[str] = []
        self._items = items or []

    async def lookup(self, query: str) -> list[KBItem]:
        self.queries.append(query)
        return list(self._items)


class StructuredSummarizer(Summarizer):
    def __init__(self, analysis: IncidentAnalysis) -> None:
        self._analysis = analysis

    async def summarize(self, events: list[Event]) -> str:
        return "structured narrative"

    async def describe(self, events: list[Event]) -> Summary:
        return Summary(text="structured narrative", analysis=self._analysis)


class FailingSummarizer(Summarizer):
    async def summarize(self, events: list[Event]) -> str:
        raise RuntimeError("oracle exploded")


def _deps(**kw: object) -> PipelineDeps:
    defaults: dict[str, object] = {
        "fingerprinter": FirstTokenFingerprinter(),
        "summarizer": RuleSummarizer(),
        "kb": StaticKnowledgeBase(),
    }
    defaults.update(kw)
    return PipelineDeps(**defaults)  # type: ignore[arg-type]


class TestRunPipeline:
    async def test_kb_suggestions_from_summary(self) -> None:
        event = Event(message="ECONNREFUSED 127.0.0.1:6379")
        result = await run_pipeline([event], _deps())
        assert result.fingerprint == "econnrefused"
        assert result.summary == "ECONNREFUSED 127.0.0.1:6379"
        assert len(result.suggestions) == 1
        suggestion = result.suggestions[0]
        assert suggestion.title == "ECONNREFUSED"
        assert suggestion.source == SuggestionSource.KB
        assert suggestion.score == KB_SUGGESTION_SCORE
        assert result.events == [event]
        assert result.analysis is None

    async def test_kb_queried_with_summary_text(self) -> None:
        kb = RecordingKnowledgeBase()
        await run_pipeline([Event(message="disk full")], _deps(kb=kb))
        assert kb.queries == ["disk full"]

    async def test_suggestion_order_preserved(self) -> None:
        items = [KBItem(pattern="a", fix="fa"), KBItem(pattern="b", fix="fb")]
        result = await run_pipeline([Event(message="x")], _deps(kb=RecordingKnowledgeBase(items)))
        assert [s.title for s in result.suggestions] == ["a", "b"]
        assert result.primary_suggestion is not None
        assert result.primary_suggestion.fix == "fa"

    @pytest.mark.parametrize("batch_size", [1, 2, 5])
    async def test_fingerprint_uses_first_event_only(self, batch_size: int) -> None:
        fingerprinter = RecordingFingerprinter()
        events = [Event(message=f"msg{i}") for i in range(batch_size)]
        result = await run_pipeline(events, _deps(fingerprinter=fingerprinter))
        assert fingerprinter.seen == [events[0]]
        assert result.fingerprint == "fp:msg0"

    async def test_empty_batch(self) -> None:
        result = await run_pipeline([], _deps())
        assert result.fingerprint == "unknown"
        assert result.summary == "No events"

    async def test_structured_analysis_carried(self) -> None:
        analysis = IncidentAnalysis(
            title="t",
            probable_cause="c",
            error_level=AnalysisLevel.ERROR,
            priority=Priority.P1,
        )
        result = await run_pipeline(
            [Event(message="x")], _deps(summarizer=StructuredSummarizer(analysis))
        )
        assert result.analysis == analysis
        assert result.summary == "structured narrative"

    async def test_stage_errors_propagate(self) -> None:
        with pytest.raises(RuntimeError, match="oracle exploded"):
            await run_pipeline([Event(message="x")], _deps(summarizer=FailingSummarizer()))
