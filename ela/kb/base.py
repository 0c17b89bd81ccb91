"""Knowledge-base contract, the static default, and a failure-degrading wrapper."""

from __future__ import annotations

import abc
import re

import structlog

from ela.core.types import KBItem

logger = structlog.stdlib.get_logger()

DEFAULT_ITEMS: list[KBItem] = [
    KBItem(
        pattern="ConnectionTimeoutError",
        fix="Check DB connection string, network reachability, and firewall rules.",
    ),
    KBItem(
        pattern="ECONNREFUSED",
        fix="Verify target service is listening on the given host:port and not blocked by firewall.",
    ),
]


class KnowledgeBase(abc.ABC):
    """Maps a query string to candidate fix patterns."""

    @abc.abstractmethod
    async def lookup(self, query: str) -> list[KBItem]:
        """Return the entries relevant to *query* (empty when none match)."""

    async def close(self) -> None:
        """Release backing-store connections. No-op by default."""


class StaticKnowledgeBase(KnowledgeBase):
    """In-memory entries matched by substring, or regex when ``item.regex``."""

    def __init__(self, items: list[KBItem] | None = None) -> None:
        self._items = list(DEFAULT_ITEMS if items is None else items)
        self._compiled: dict[str, re.Pattern[str] | None] = {}

    @property
    def items(self) -> list[KBItem]:
        return list(self._items)

    def _regex(self, pattern: str) -> re.Pattern[str] | None:
        if pattern not in self._compiled:
            try:
                self._compiled[pattern] = re.compile(pattern, re.IGNORECASE)
            except re.error:
                logger.warning("kb_invalid_regex", pattern=pattern)
                self._compiled[pattern] = None
        return self._compiled[pattern]

    def _matches(self, item: KBItem, query: str) -> bool:
        if not item.regex:
            return item.pattern in query
        compiled = self._regex(item.pattern)
        return compiled is not None and compiled.search(query) is not None

    async def lookup(self, query: str) -> list[KBItem]:
        return [item for item in self._items if self._matches(item, query)]


class SafeKnowledgeBase(KnowledgeBase):
    """Wraps any knowledge base so lookup failures yield no suggestions."""

    def __init__(self, inner: KnowledgeBase) -> None:
        self._inner = inner

    async def lookup(self, query: str) -> list[KBItem]:
        try:
            return await self._inner.lookup(query)
        except Exception:
            logger.exception("kb_lookup_failed", kb=type(self._inner).__name__)
            return []

    async def close(self) -> None:
        await self._inner.close()
