"""Summarizers: rule-based default and the resilient oracle adapter."""

from ela.summarize.base import RuleSummarizer, Summarizer
from ela.summarize.exceptions import (
    OracleConfigError,
    OracleError,
    OracleHTTPError,
    OracleTimeoutError,
    OracleTransportError,
    SummarizerError,
)
from ela.summarize.gemini import GeminiClient
from ela.summarize.narrative import ParsedNarrative, parse_narrative, render_narrative
from ela.summarize.normalize import infer_highest_level, normalize_response
from ela.summarize.oracle import OracleClient, OracleSummarizer
from ela.summarize.redact import scrub

__all__ = [
    "GeminiClient",
    "OracleClient",
    "OracleConfigError",
    "OracleError",
    "OracleHTTPError",
    "OracleSummarizer",
    "OracleTimeoutError",
    "OracleTransportError",
    "ParsedNarrative",
    "RuleSummarizer",
    "Summarizer",
    "SummarizerError",
    "infer_highest_level",
    "normalize_response",
    "parse_narrative",
    "render_narrative",
    "scrub",
]
