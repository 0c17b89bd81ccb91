"""Turn untrusted oracle text into a validated :class:`IncidentAnalysis`.

The oracle is asked for a single JSON object but routinely wraps it in prose,
code fences, or leaves trailing commas. Nothing here raises: a response with
no usable JSON degrades to a fallback analysis built from the raw text.
"""

from __future__ import annotations

import json
import re
from typing import Any

import structlog

from ela.core.types import AnalysisLevel, Event, IncidentAnalysis, Level, Priority

logger = structlog.stdlib.get_logger()

DEFAULT_TITLE = "Analysis"
DEFAULT_CAUSE = (
    "Insufficient details; verify service status, connectivity, and recent changes."
)
DEFAULT_CONFIDENCE = 0.6
FALLBACK_EXCERPT_CHARS = 200

_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

_LIST_FIELDS = ("files_to_check", "commands_to_run", "checks", "fixes", "related_docs")

_PRIORITY_BY_LEVEL: dict[AnalysisLevel, Priority] = {
    AnalysisLevel.ERROR: Priority.P1,
    AnalysisLevel.WARN: Priority.P2,
    AnalysisLevel.INFO: Priority.P3,
}


def infer_highest_level(events: list[Event]) -> AnalysisLevel:
    """Most severe level in the batch by precedence: error > warn > info.

    Fatal counts as error; trace, debug and missing levels count as info.
    """
    levels = {event.level or Level.INFO for event in events}
    if levels & {Level.ERROR, Level.FATAL}:
        return AnalysisLevel.ERROR
    if Level.WARN in levels:
        return AnalysisLevel.WARN
    return AnalysisLevel.INFO


def default_priority(level: AnalysisLevel) -> Priority:
    return _PRIORITY_BY_LEVEL[level]


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def extract_json_object(raw: str) -> dict[str, Any] | None:
    """Parse the ``{...}`` span of *raw*, tolerating prose and trailing commas."""
    start = raw.find("{")
    end = raw.rfind("}")
    if start < 0 or end <= start:
        return None
    candidate = _TRAILING_COMMA_RE.sub(r"\1", raw[start : end + 1])
    try:
        parsed = json.loads(candidate)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [text for text in (_text(item) for item in value) if text]


def _level(value: Any) -> AnalysisLevel | None:
    try:
        return AnalysisLevel(_text(value).lower())
    except ValueError:
        return None


def _priority(value: Any) -> Priority | None:
    try:
        return Priority(_text(value).upper())
    except ValueError:
        return None


def normalize_response(raw: str, events: list[Event]) -> IncidentAnalysis:
    """Build a fully-populated analysis from raw oracle text."""
    obj = extract_json_object(raw)
    if obj is None:
        logger.warning("oracle_output_unparseable", length=len(raw))
        obj = {"title": DEFAULT_TITLE, "probable_cause": raw[:FALLBACK_EXCERPT_CHARS]}

    level = _level(obj.get("error_level")) or infer_highest_level(events)
    priority = _priority(obj.get("priority")) or default_priority(level)

    confidence = obj.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        confidence = DEFAULT_CONFIDENCE

    return IncidentAnalysis(
        title=_text(obj.get("title")) or DEFAULT_TITLE,
        probable_cause=_text(obj.get("probable_cause")) or DEFAULT_CAUSE,
        error_level=level,
        priority=priority,
        confidence=clamp01(float(confidence)),
        **{name: _string_list(obj.get(name)) for name in _LIST_FIELDS},
    )
