"""Persistence sink — aggregates results into incident groups.

Each publish runs one transaction:

1. upsert the group for ``(fingerprint, service)``, incrementing its count;
2. append the raw event;
3. append the structured analysis plus the verbatim narrative.

Uniqueness of the group key is enforced by the database's unique
constraint and native upsert, so concurrent publishes for the same key
never create duplicates or lose increments. The SQLAlchemy engine is
synchronous; each publish runs in a worker thread.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import Engine, create_engine, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.orm import Session, sessionmaker

from ela.core.config import DatabaseConfig
from ela.core.types import AnalysisResult, Event, json_safe
from ela.sinks.base import Sink, SinkError
from ela.sinks.models import AnalysisRecord, Base, EventRecord, IncidentGroup
from ela.summarize.narrative import ParsedNarrative, parse_narrative

logger = structlog.stdlib.get_logger()


def create_db_engine(config: DatabaseConfig) -> Engine:
    """Build the long-lived engine for the configured URL."""
    return create_engine(
        config.url.get_secret_value(), echo=config.echo, pool_pre_ping=True
    )


def _upsert_statement(dialect: str, values: dict[str, Any], now: datetime) -> Any:
    table = IncidentGroup.__table__
    increment = {"last_seen": now, "total_count": table.c.total_count + 1}

    if dialect == "sqlite":
        return sqlite.insert(table).values(**values).on_conflict_do_update(
            index_elements=["fingerprint", "service"], set_=increment
        )
    if dialect == "postgresql":
        return postgresql.insert(table).values(**values).on_conflict_do_update(
            index_elements=["fingerprint", "service"], set_=increment
        )
    if dialect in ("mysql", "mariadb"):
        return mysql.insert(table).values(**values).on_duplicate_key_update(**increment)
    raise SinkError(f"unsupported database dialect for incident upsert: {dialect}")


def _event_record(group_id: int, event: Event) -> EventRecord:
    return EventRecord(
        group_id=group_id,
        ts=event.timestamp,
        level=event.level.value if event.level else None,
        message=event.message,
        service=event.service,
        logger=event.logger,
        module=event.module,
        line=event.line,
        stack=event.stack,
        meta={key: json_safe(value) for key, value in event.meta.items()} or None,
    )


def structured_fields(result: AnalysisResult) -> ParsedNarrative:
    """Structured analysis if the summarizer supplied it, else parsed from the narrative."""
    if result.analysis is not None:
        return ParsedNarrative.from_analysis(result.analysis)
    return parse_narrative(result.summary)


class SqlSink(Sink):
    """Stores incident groups, events and analyses in a relational database.

    Usage::

        engine = create_db_engine(settings.database)
        sink = SqlSink(engine)
        await sink.init_schema()
        await sink.publish(result)
        await sink.close()
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._sessions = sessionmaker(engine, expire_on_commit=False)

    @property
    def engine(self) -> Engine:
        return self._engine

    async def init_schema(self) -> None:
        """Create the tables if they do not exist."""
        await asyncio.to_thread(Base.metadata.create_all, self._engine)

    async def publish(self, result: AnalysisResult) -> None:
        if not result.events:
            return
        group_id = await asyncio.to_thread(self._publish_sync, result)
        logger.info(
            "incident_persisted",
            fingerprint=result.fingerprint,
            service=result.events[0].service or "",
            group_id=group_id,
        )

    def _publish_sync(self, result: AnalysisResult) -> int:
        event = result.events[0]
        service = event.service or ""
        now = datetime.now(timezone.utc)

        with self._sessions.begin() as session:
            group_id = self._upsert_group(session, result.fingerprint, service, now)
            session.add(_event_record(group_id, event))

            parsed = structured_fields(result)
            session.add(AnalysisRecord(
                group_id=group_id,
                created_at=now,
                level=parsed.level or (event.level.value if event.level else None),
                priority=parsed.priority,
                title=parsed.title,
                probable_cause=parsed.probable_cause,
                confidence=parsed.confidence,
                files_to_check=parsed.files_to_check,
                checks=parsed.checks,
                commands=parsed.commands,
                fixes=parsed.fixes,
                related_docs=parsed.related_docs,
                raw_summary=result.summary,
            ))
        return group_id

    def _upsert_group(
        self, session: Session, fingerprint: str, service: str, now: datetime
    ) -> int:
        values = {
            "fingerprint": fingerprint,
            "service": service,
            "first_seen": now,
            "last_seen": now,
            "total_count": 1,
        }
        session.execute(_upsert_statement(self._engine.dialect.name, values, now))
        return session.execute(
            select(IncidentGroup.id).where(
                IncidentGroup.fingerprint == fingerprint,
                IncidentGroup.service == service,
            )
        ).scalar_one()

    async def close(self) -> None:
        await asyncio.to_thread(self._engine.dispose)
