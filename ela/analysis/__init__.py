"""Analysis orchestration: fingerprinting, pipeline, analyzer fan-out."""

from ela.analysis.analyzer import Analyzer, IngestReport, SinkOutcome
from ela.analysis.exceptions import AnalysisError, SinkPublishError
from ela.analysis.factory import create_analyzer, create_summarizer
from ela.analysis.fingerprint import UNKNOWN_FINGERPRINT, Fingerprinter, FirstTokenFingerprinter
from ela.analysis.pipeline import KB_SUGGESTION_SCORE, PipelineDeps, run_pipeline

__all__ = [
    "KB_SUGGESTION_SCORE",
    "UNKNOWN_FINGERPRINT",
    "AnalysisError",
    "Analyzer",
    "Fingerprinter",
    "FirstTokenFingerprinter",
    "IngestReport",
    "PipelineDeps",
    "SinkOutcome",
    "SinkPublishError",
    "create_analyzer",
    "create_summarizer",
    "run_pipeline",
]
