"""Adapters that turn host logging records into analyzer events."""

from ela.adapters.logging_handler import AnalyzerHandler, event_from_record, level_from_record

__all__ = [
    "AnalyzerHandler",
    "event_from_record",
    "level_from_record",
]
