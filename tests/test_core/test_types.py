"""Tests for ela/core/types.py: event model, ordering, immutability."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from ela.core.types import (
    AnalysisResult,
    Event,
    Level,
    Suggestion,
    SuggestionSource,
    json_safe,
)


class TestLevel:
    def test_rank_order(self) -> None:
        ordered = [Level.TRACE, Level.DEBUG, Level.INFO, Level.WARN, Level.ERROR, Level.FATAL]
        assert [lvl.rank for lvl in ordered] == sorted(lvl.rank for lvl in ordered)
        assert Level.ERROR.rank > Level.WARN.rank

    def test_parse_from_string(self) -> None:
        assert Event(message="x", level="warn").level == Level.WARN  # type: ignore[arg-type]


class TestEvent:
    def test_timestamp_defaults_to_now(self) -> None:
        before = datetime.now(timezone.utc)
        event = Event(message="boom")
        assert event.timestamp >= before
        assert event.meta == {}

    def test_message_required(self) -> None:
        with pytest.raises(ValidationError):
            Event()  # type: ignore[call-arg]

    def test_frozen(self) -> None:
        event = Event(message="boom")
        with pytest.raises(ValidationError):
            event.message = "other"  # type: ignore[misc]


class TestSuggestion:
    def test_score_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Suggestion(title="t", score=1.5)

    def test_default_source_is_rule(self) -> None:
        assert Suggestion(title="t").source == SuggestionSource.RULE


class TestAnalysisResult:
    def test_primary_suggestion(self) -> None:
        first = Suggestion(title="a", fix="fix a")
        result = AnalysisResult(
            fingerprint="fp",
            summary="s",
            suggestions=[first, Suggestion(title="b")],
        )
        assert result.primary_suggestion == first

    def test_primary_suggestion_none(self) -> None:
        assert AnalysisResult(fingerprint="fp", summary="s").primary_suggestion is None

    def test_events_are_referenced(self) -> None:
        event = Event(message="boom")
        result = AnalysisResult(fingerprint="fp", summary="s", events=[event])
        assert result.events[0] is event


class TestJsonSafe:
    def test_plain_values_unchanged(self) -> None:
        assert json_safe({"a": [1, "x", None]}) == {"a": [1, "x", None]}

    def test_datetime_becomes_string(self) -> None:
        at = datetime(2026, 3, 1, tzinfo=timezone.utc)
        assert json_safe(at) == str(at)
        assert json_safe({"at": at}) == {"at": str(at)}

    def test_circular_value_falls_back_to_repr(self) -> None:
        loop: list = []
        loop.append(loop)
        assert json_safe(loop) == "[[...]]"
