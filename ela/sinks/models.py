"""SQLAlchemy tables for incident groups and their event/analysis history."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class IncidentGroup(Base):
    __tablename__ = "incident_groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fingerprint: Mapped[str] = mapped_column(String(255), index=True)
    # Absent services are stored as "" so the unique key also covers them.
    service: Mapped[str] = mapped_column(String(255), default="")
    first_seen: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    last_seen: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    total_count: Mapped[int] = mapped_column(Integer, default=1)

    events: Mapped[list[EventRecord]] = relationship(back_populates="group")
    analyses: Mapped[list[AnalysisRecord]] = relationship(back_populates="group")

    __table_args__ = (
        UniqueConstraint("fingerprint", "service", name="ux_incident_groups_fingerprint_service"),
    )


class EventRecord(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("incident_groups.id"), index=True)
    ts: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    level: Mapped[str | None] = mapped_column(String(16), default=None)
    message: Mapped[str] = mapped_column(Text)
    service: Mapped[str | None] = mapped_column(String(255), default=None)
    logger: Mapped[str | None] = mapped_column(String(255), default=None)
    module: Mapped[str | None] = mapped_column(String(255), default=None)
    line: Mapped[int | None] = mapped_column(Integer, default=None)
    stack: Mapped[str | None] = mapped_column(Text, default=None)
    meta: Mapped[dict[str, Any] | None] = mapped_column(JSON, default=None)

    group: Mapped[IncidentGroup] = relationship(back_populates="events")


class AnalysisRecord(Base):
    __tablename__ = "analyses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("incident_groups.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    level: Mapped[str | None] = mapped_column(String(16), default=None)
    priority: Mapped[str | None] = mapped_column(String(4), default=None)
    title: Mapped[str | None] = mapped_column(Text, default=None)
    probable_cause: Mapped[str | None] = mapped_column(Text, default=None)
    confidence: Mapped[float | None] = mapped_column(Float, default=None)
    files_to_check: Mapped[list[str]] = mapped_column(JSON, default=list)
    checks: Mapped[list[str]] = mapped_column(JSON, default=list)
    commands: Mapped[list[str]] = mapped_column(JSON, default=list)
    fixes: Mapped[list[str]] = mapped_column(JSON, default=list)
    related_docs: Mapped[list[str]] = mapped_column(JSON, default=list)
    raw_summary: Mapped[str] = mapped_column(Text)

    group: Mapped[IncidentGroup] = relationship(back_populates="analyses")
