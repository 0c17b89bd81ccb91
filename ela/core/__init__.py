"""Core module: config, types, logging."""

from ela.core.config import Settings, get_settings, load_settings, reset_settings
from ela.core.logging import setup_logging
from ela.core.types import (
    AnalysisLevel,
    AnalysisResult,
    Event,
    IncidentAnalysis,
    KBItem,
    Level,
    Priority,
    Suggestion,
    SuggestionSource,
    Summary,
)

__all__ = [
    "AnalysisLevel",
    "AnalysisResult",
    "Event",
    "IncidentAnalysis",
    "KBItem",
    "Level",
    "Priority",
    "Settings",
    "Suggestion",
    "SuggestionSource",
    "Summary",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
