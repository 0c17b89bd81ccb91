"""Convenience factory for wiring an analyzer from settings."""

from __future__ import annotations

from ela.analysis.analyzer import Analyzer
from ela.analysis.fingerprint import FirstTokenFingerprinter
from ela.core.config import Settings
from ela.kb.base import DEFAULT_ITEMS, StaticKnowledgeBase
from ela.sinks.base import Sink
from ela.sinks.log import LogSink
from ela.sinks.sql import SqlSink, create_db_engine
from ela.summarize.base import RuleSummarizer, Summarizer
from ela.summarize.gemini import GeminiClient
from ela.summarize.oracle import OracleSummarizer


def create_summarizer(settings: Settings) -> Summarizer:
    cfg = settings.summarizer
    if cfg.provider == "gemini":
        return OracleSummarizer(GeminiClient(cfg), cfg)
    return RuleSummarizer(max_chars=cfg.rule_max_chars)


async def create_analyzer(settings: Settings) -> Analyzer:
    """Build an analyzer and its long-lived clients from config.

    The returned analyzer owns the oracle client and database engine;
    close it at shutdown.
    """
    kb_cfg = settings.knowledge_base
    items = (list(DEFAULT_ITEMS) if kb_cfg.include_defaults else []) + list(kb_cfg.entries)

    # Oracle config errors surface before any database resource exists.
    summarizer = create_summarizer(settings)

    sinks: list[Sink] = []
    if settings.sinks.log:
        sinks.append(LogSink())
    if settings.sinks.database:
        sql_sink = SqlSink(create_db_engine(settings.database))
        if settings.database.create_schema:
            try:
                await sql_sink.init_schema()
            except Exception:
                await sql_sink.close()
                await summarizer.close()
                raise
        sinks.append(sql_sink)

    return Analyzer(
        fingerprinter=FirstTokenFingerprinter(),
        summarizer=summarizer,
        kb=StaticKnowledgeBase(items),
        sinks=sinks,
    )
