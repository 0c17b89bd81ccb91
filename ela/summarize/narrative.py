"""Labeled-section narrative layout shared by summarizers and sinks.

Layout::

    Title: <title>
    Probable Cause: <cause>
    Level: <level>   Priority: <Pn>   Confidence: <n>%
    Files to Check:
     - <item>
    Checks: (none)
    Commands:
     - <item>
    Fixes:
     - <item>
    Docs:
     - <item>

``Docs`` is only present when there are related docs. Renderer and parser
must change together.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

from ela.core.types import IncidentAnalysis

NONE_MARKER = "(none)"

_SECTIONS: dict[str, str] = {
    "Files to Check": "files_to_check",
    "Checks": "checks",
    "Commands": "commands",
    "Fixes": "fixes",
    "Docs": "related_docs",
}

_SCALAR_RE = {
    "title": re.compile(r"^Title:[ \t]*(.*)$", re.IGNORECASE | re.MULTILINE),
    "probable_cause": re.compile(r"^Probable Cause:[ \t]*(.*)$", re.IGNORECASE | re.MULTILINE),
}
_HEADER_RE = re.compile(r"^Level:.*$", re.IGNORECASE | re.MULTILINE)
_LEVEL_RE = re.compile(r"Level:\s*([a-z]+)", re.IGNORECASE)
_PRIORITY_RE = re.compile(r"Priority:\s*(P[0-3])", re.IGNORECASE)
_CONFIDENCE_RE = re.compile(r"Confidence:\s*(\d+)%", re.IGNORECASE)
_SECTION_RE = re.compile(
    r"^(" + "|".join(re.escape(label) for label in _SECTIONS) + r"):[ \t]*(.*)$",
    re.IGNORECASE,
)


class ParsedNarrative(BaseModel):
    """Fields recovered from a narrative; scalars are None when absent."""

    title: str | None = None
    probable_cause: str | None = None
    level: str | None = None
    priority: str | None = None
    confidence: float | None = None
    files_to_check: list[str] = Field(default_factory=list)
    checks: list[str] = Field(default_factory=list)
    commands: list[str] = Field(default_factory=list)
    fixes: list[str] = Field(default_factory=list)
    related_docs: list[str] = Field(default_factory=list)

    @classmethod
    def from_analysis(cls, analysis: IncidentAnalysis) -> ParsedNarrative:
        return cls(
            title=analysis.title,
            probable_cause=analysis.probable_cause,
            level=analysis.error_level.value,
            priority=analysis.priority.value,
            confidence=analysis.confidence,
            files_to_check=list(analysis.files_to_check),
            checks=list(analysis.checks),
            commands=list(analysis.commands_to_run),
            fixes=list(analysis.fixes),
            related_docs=list(analysis.related_docs),
        )


def _one_line(text: str) -> str:
    return " ".join(text.split())


def _bullets(items: list[str]) -> str:
    lines = [_one_line(item) for item in items]
    lines = [line for line in lines if line]
    if not lines:
        return f" {NONE_MARKER}"
    return "".join(f"\n - {line}" for line in lines)


def render_narrative(analysis: IncidentAnalysis) -> str:
    """Serialize an analysis into the labeled-section layout."""
    lines = [
        f"Title: {_one_line(analysis.title)}",
        f"Probable Cause: {_one_line(analysis.probable_cause)}",
        f"Level: {analysis.error_level.value}   Priority: {analysis.priority.value}"
        f"   Confidence: {round(analysis.confidence * 100)}%",
        f"Files to Check:{_bullets(analysis.files_to_check)}",
        f"Checks:{_bullets(analysis.checks)}",
        f"Commands:{_bullets(analysis.commands_to_run)}",
        f"Fixes:{_bullets(analysis.fixes)}",
    ]
    if analysis.related_docs:
        lines.append(f"Docs:{_bullets(analysis.related_docs)}")
    return "\n".join(lines)


def _pick(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    if match is None:
        return None
    return match.group(1).strip() or None


def _sections(text: str) -> dict[str, list[str]]:
    """Collect ``- `` bullet lines under each list label until the next unindented line."""
    found: dict[str, list[str]] = {}
    current: list[str] | None = None
    for line in text.split("\n"):
        match = _SECTION_RE.match(line)
        if match is not None:
            label = next(k for k in _SECTIONS if k.lower() == match.group(1).lower())
            current = found.setdefault(_SECTIONS[label], [])
            continue
        stripped = line.strip()
        if current is not None and stripped.startswith("- "):
            current.append(stripped[2:].strip())
        elif line and not line[0].isspace():
            current = None
    return found


def parse_narrative(text: str) -> ParsedNarrative:
    """Recover structured fields from a narrative; missing pieces stay empty."""
    header = _HEADER_RE.search(text)
    header_line = header.group(0) if header else ""

    level = _pick(_LEVEL_RE, header_line)
    priority = _pick(_PRIORITY_RE, header_line)
    confidence_pct = _pick(_CONFIDENCE_RE, header_line)

    return ParsedNarrative(
        title=_pick(_SCALAR_RE["title"], text),
        probable_cause=_pick(_SCALAR_RE["probable_cause"], text),
        level=level.lower() if level else None,
        priority=priority.upper() if priority else None,
        confidence=int(confidence_pct) / 100 if confidence_pct else None,
        **_sections(text),
    )
