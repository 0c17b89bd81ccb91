"""Prompt assembly for the oracle: redacted, truncated per-event blocks."""

from __future__ import annotations

import re

from ela.core.types import Event
from ela.summarize.redact import scrub

MAX_SEED_FILES = 10

_EXTENSIONS = (
    "tsx", "ts", "jsx", "json", "js", "mjs", "cjs", "py", "go", "rb", "java",
    "cs", "sql", "yaml", "yml", "conf", "ini",
)

# file.ts:123, /path/to/file.js:45, src/db.ts, db.py(12)
_PATH_RE = re.compile(
    r"(?:[A-Za-z]:)?[./\w-]+?\.(?:" + "|".join(_EXTENSIONS) + r")\b(?:[:(]\d+[:)]?)?"
)
_LINE_SUFFIX_RE = re.compile(r"[:(]\d+[:)]?$")

ROLE = "You are a senior SRE. Read the logs and produce a terse, actionable incident analysis."

GUIDELINES = """Guidelines:
- Be specific about files/modules (e.g., "src/db.py", "docker-compose.yml", "nginx.conf").
- Include concrete CLI checks (e.g., "redis-cli ping", "lsof -i :6379", "kubectl logs <pod>").
- Prioritize least-risk, fastest fixes first; if unsure, propose useful checks and set confidence.
- Map severity to "error_level": use the most severe level seen in logs.
- If SEED_FILES are provided, consider them in "files_to_check"."""

SCHEMA_HINT = """Return ONLY valid JSON (no backticks). Use this exact shape:
{
  "title": string,
  "probable_cause": string,
  "error_level": "error"|"warn"|"info",
  "priority": "P0"|"P1"|"P2"|"P3",
  "files_to_check": string[],
  "commands_to_run": string[],
  "checks": string[],
  "fixes": string[],
  "related_docs": string[] | [],
  "confidence": number
}"""


def truncate_stack(stack: str | None, max_lines: int) -> str:
    """Keep at most *max_lines* lines of a stack trace."""
    if not stack:
        return ""
    return "\n".join(stack.split("\n")[: max(0, max_lines)]).strip()


def extract_paths(text: str) -> list[str]:
    """Return up to ten distinct file-path-like tokens, line suffixes removed."""
    if not text:
        return []
    hits: dict[str, None] = {}
    for match in _PATH_RE.finditer(text):
        hits.setdefault(_LINE_SUFFIX_RE.sub("", match.group(0)), None)
        if len(hits) >= MAX_SEED_FILES:
            break
    return list(hits)


def event_block(index: int, event: Event, stack_lines: int) -> str:
    message = scrub(event.message)
    stack = scrub(truncate_stack(event.stack, stack_lines))
    seeds = extract_paths(f"{message}\n{stack}")

    level = event.level.value if event.level else "info"
    parts = [f"#{index} [{level}] {message}"]
    if stack:
        parts.append(f"STACK:\n{stack}")
    if seeds:
        parts.append("SEED_FILES:\n" + "\n".join(seeds))
    return "\n".join(parts)


def build_prompt(events: list[Event], stack_lines: int = 6) -> str:
    """Build the single oracle request for a batch of events."""
    blocks = "\n\n".join(
        event_block(i, event, stack_lines) for i, event in enumerate(events, start=1)
    )
    return f"{ROLE}\n\n{GUIDELINES}\n\n{SCHEMA_HINT}\n\nLogs:\n{blocks}\n"
