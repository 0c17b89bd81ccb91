"""Domain types for the analysis pipeline: events, suggestions, results."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def json_safe(value: Any) -> Any:
    """Coerce *value* into plain JSON data; unknown objects become strings."""
    try:
        return json.loads(json.dumps(value, default=str))
    except (TypeError, ValueError):
        return repr(value)


class Level(StrEnum):
    """Event severity; ``rank`` gives the natural ordering."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)


_LEVEL_ORDER: list[Level] = [
    Level.TRACE,
    Level.DEBUG,
    Level.INFO,
    Level.WARN,
    Level.ERROR,
    Level.FATAL,
]


class Event(BaseModel):
    """One normalized occurrence handed to the analyzer by an adapter."""

    model_config = ConfigDict(frozen=True)

    message: str
    timestamp: datetime = Field(default_factory=_utcnow)
    level: Level | None = None
    service: str | None = None
    logger: str | None = None
    module: str | None = None
    line: int | None = None
    stack: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)


class SuggestionSource(StrEnum):
    """Where a suggestion came from."""

    KB = "kb"
    LLM = "llm"
    RULE = "rule"


class Suggestion(BaseModel):
    """A candidate remediation. The first suggestion in a result is the primary one."""

    model_config = ConfigDict(frozen=True)

    title: str
    fix: str | None = None
    source: SuggestionSource = SuggestionSource.RULE
    score: float | None = Field(default=None, ge=0.0, le=1.0)


class KBItem(BaseModel):
    """Knowledge-base entry: a substring (or regex when ``regex``) and its fix."""

    model_config = ConfigDict(frozen=True)

    pattern: str
    fix: str
    doc: str | None = None
    regex: bool = False


# ── Structured analysis ─────────────────────────────────────────


class AnalysisLevel(StrEnum):
    """Severity vocabulary used in structured analyses."""

    ERROR = "error"
    WARN = "warn"
    INFO = "info"


class Priority(StrEnum):
    """Incident priority, P0 most urgent."""

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"


class IncidentAnalysis(BaseModel):
    """Normalized root-cause analysis produced from an oracle response."""

    model_config = ConfigDict(frozen=True)

    title: str
    probable_cause: str
    error_level: AnalysisLevel
    priority: Priority
    files_to_check: list[str] = Field(default_factory=list)
    commands_to_run: list[str] = Field(default_factory=list)
    checks: list[str] = Field(default_factory=list)
    fixes: list[str] = Field(default_factory=list)
    related_docs: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.6, ge=0.0, le=1.0)


class Summary(BaseModel):
    """Narrative text plus, when the summarizer has it, the structure behind it."""

    model_config = ConfigDict(frozen=True)

    text: str
    analysis: IncidentAnalysis | None = None


class AnalysisResult(BaseModel):
    """Output of one pipeline run; shared read-only by every sink."""

    model_config = ConfigDict(frozen=True)

    fingerprint: str
    summary: str
    suggestions: list[Suggestion] = Field(default_factory=list)
    events: list[Event] = Field(default_factory=list)
    analysis: IncidentAnalysis | None = None

    @property
    def primary_suggestion(self) -> Suggestion | None:
        return self.suggestions[0] if self.suggestions else None
