#!/usr/bin/env python3
"""Analyze log events from a JSON-lines file or a single message.

Usage::

    # One ad-hoc event
    python scripts/run.py --message "ECONNREFUSED 127.0.0.1:6379" --level error

    # One event per line: {"message": "...", "level": "error", "service": "api"}
    python scripts/run.py --events events.jsonl --config config/settings.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from ela.analysis.factory import create_analyzer
from ela.core.config import load_settings
from ela.core.logging import setup_logging
from ela.core.types import Event

logger = structlog.get_logger(__name__)


def _load_events(args: argparse.Namespace) -> list[Event]:
    if args.message:
        return [Event(message=args.message, level=args.level, service=args.service)]

    events: list[Event] = []
    for lineno, line in enumerate(Path(args.events).read_text().splitlines(), start=1):
        if not line.strip():
            continue
        try:
            events.append(Event.model_validate(json.loads(line)))
        except (ValueError, ValidationError) as exc:
            logger.warning("event_line_skipped", line=lineno, error=str(exc))
    return events


async def run(args: argparse.Namespace) -> int:
    """Ingest every event and report per-sink outcomes."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    events = _load_events(args)
    if not events:
        print("No events to analyze.", file=sys.stderr)
        return 1

    failed = 0
    async with await create_analyzer(settings) as analyzer:
        for event in events:
            report = await analyzer.try_ingest(event)
            if report is None or not report.ok:
                failed += 1
                continue
            print(f"\n[{report.result.fingerprint}]\n{report.result.summary}")
            primary = report.result.primary_suggestion
            print(f"Suggested Fix: {primary.fix if primary and primary.fix else '(none)'}")

    logger.info("analysis_finished", events=len(events), failed=failed)
    return 1 if failed else 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Analyze log events into incidents.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--events", help="Path to a JSON-lines file of events")
    source.add_argument("--message", help="Analyze a single message")
    parser.add_argument("--level", default="error", help="Level for --message")
    parser.add_argument("--service", default=None, help="Service for --message")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
