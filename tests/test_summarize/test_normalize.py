"""Tests for ela/summarize/normalize.py: untrusted oracle output handling."""

from __future__ import annotations

import pytest

from ela.core.types import AnalysisLevel, Event, Level, Priority
from ela.summarize.normalize import (
    DEFAULT_CAUSE,
    DEFAULT_CONFIDENCE,
    FALLBACK_EXCERPT_CHARS,
    clamp01,
    default_priority,
    extract_json_object,
    infer_highest_level,
    normalize_response,
)


def _events(*levels: Level | None) -> list[Event]:
    return [Event(message=f"m{i}", level=lvl) for i, lvl in enumerate(levels)]


class TestInferHighestLevel:
    def test_error_wins_regardless_of_position(self) -> None:
        assert infer_highest_level(_events(Level.INFO, Level.WARN, Level.ERROR)) == AnalysisLevel.ERROR
        assert infer_highest_level(_events(Level.ERROR, Level.WARN, Level.INFO)) == AnalysisLevel.ERROR

    def test_warn_over_info(self) -> None:
        assert infer_highest_level(_events(Level.INFO, Level.WARN, Level.INFO)) == AnalysisLevel.WARN

    def test_info_default(self) -> None:
        assert infer_highest_level(_events(None, Level.DEBUG, Level.TRACE)) == AnalysisLevel.INFO
        assert infer_highest_level([]) == AnalysisLevel.INFO

    def test_fatal_counts_as_error(self) -> None:
        assert infer_highest_level(_events(Level.WARN, Level.FATAL)) == AnalysisLevel.ERROR


class TestHelpers:
    @pytest.mark.parametrize(
        ("level", "priority"),
        [
            (AnalysisLevel.ERROR, Priority.P1),
            (AnalysisLevel.WARN, Priority.P2),
            (AnalysisLevel.INFO, Priority.P3),
        ],
    )
    def test_default_priority(self, level: AnalysisLevel, priority: Priority) -> None:
        assert default_priority(level) == priority

    def test_clamp01(self) -> None:
        assert clamp01(-0.5) == 0.0
        assert clamp01(1.7) == 1.0
        assert clamp01(0.42) == 0.42

    def test_extract_rejects_arrays(self) -> None:
        assert extract_json_object("[1, 2]") is None

    def test_extract_code_fence(self) -> None:
        raw = '```json\n{"title": "Redis down"}\n```'
        assert extract_json_object(raw) == {"title": "Redis down"}


class TestNormalizeResponse:
    def test_prose_and_trailing_commas(self) -> None:
        raw = (
            "Sure! Here is the analysis:\n"
            '{"title": "Redis unreachable", "probable_cause": "cache host down",'
            ' "error_level": "error", "priority": "P0",'
            ' "files_to_check": ["cache.py", "docker-compose.yml",],'
            ' "commands_to_run": ["redis-cli ping"], "checks": ["is redis up"],'
            ' "fixes": ["restart redis",], "confidence": 0.85,}\n'
            "Let me know if you need more."
        )
        result = normalize_response(raw, _events(Level.ERROR))
        assert result.title == "Redis unreachable"
        assert result.probable_cause == "cache host down"
        assert result.error_level == AnalysisLevel.ERROR
        assert result.priority == Priority.P0
        assert result.files_to_check == ["cache.py", "docker-compose.yml"]
        assert result.commands_to_run == ["redis-cli ping"]
        assert result.checks == ["is redis up"]
        assert result.fixes == ["restart redis"]
        assert result.related_docs == []
        assert result.confidence == 0.85

    def test_missing_fields_defaulted(self) -> None:
        result = normalize_response('{"title": "  Disk full  "}', _events(Level.INFO, Level.WARN))
        assert result.title == "Disk full"
        assert result.probable_cause == DEFAULT_CAUSE
        assert result.error_level == AnalysisLevel.WARN
        assert result.priority == Priority.P2
        assert result.files_to_check == []
        assert result.confidence == DEFAULT_CONFIDENCE

    def test_priority_follows_reported_level(self) -> None:
        result = normalize_response('{"error_level": "info"}', _events(Level.ERROR))
        assert result.error_level == AnalysisLevel.INFO
        assert result.priority == Priority.P3

    def test_invalid_values_replaced(self) -> None:
        raw = (
            '{"error_level": "catastrophic", "priority": "urgent",'
            ' "files_to_check": "app.py", "fixes": [1, "", null, "retry"],'
            ' "confidence": "high"}'
        )
        result = normalize_response(raw, _events(Level.ERROR))
        assert result.error_level == AnalysisLevel.ERROR
        assert result.priority == Priority.P1
        assert result.files_to_check == []
        assert result.fixes == ["1", "retry"]
        assert result.confidence == DEFAULT_CONFIDENCE

    def test_confidence_clamped(self) -> None:
        assert normalize_response('{"confidence": 7}', []).confidence == 1.0
        assert normalize_response('{"confidence": -2}', []).confidence == 0.0

    def test_boolean_confidence_ignored(self) -> None:
        assert normalize_response('{"confidence": true}', []).confidence == DEFAULT_CONFIDENCE

    def test_no_json_falls_back(self) -> None:
        raw = "The model is overloaded. " * 20
        result = normalize_response(raw, _events(Level.ERROR))
        assert raw.startswith(result.probable_cause)
        assert len(result.probable_cause) <= FALLBACK_EXCERPT_CHARS
        assert result.title == "Analysis"
        assert result.confidence == DEFAULT_CONFIDENCE
        assert result.error_level == AnalysisLevel.ERROR
        assert result.priority == Priority.P1

    def test_broken_json_falls_back(self) -> None:
        result = normalize_response('{"title": "x", oops}', [])
        assert result.probable_cause == '{"title": "x", oops}'

    def test_empty_response(self) -> None:
        result = normalize_response("", [])
        assert result.probable_cause == DEFAULT_CAUSE
        assert result.error_level == AnalysisLevel.INFO
