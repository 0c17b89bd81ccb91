"""Sinks: structured-log output and relational persistence of incidents."""

from ela.sinks.base import Sink, SinkError
from ela.sinks.log import LogSink
from ela.sinks.models import AnalysisRecord, Base, EventRecord, IncidentGroup
from ela.sinks.sql import SqlSink, create_db_engine, structured_fields

__all__ = [
    "AnalysisRecord",
    "Base",
    "EventRecord",
    "IncidentGroup",
    "LogSink",
    "Sink",
    "SinkError",
    "SqlSink",
    "create_db_engine",
    "structured_fields",
]
