"""Knowledge base: fix patterns looked up from analysis text."""

from ela.kb.base import DEFAULT_ITEMS, KnowledgeBase, SafeKnowledgeBase, StaticKnowledgeBase

__all__ = [
    "DEFAULT_ITEMS",
    "KnowledgeBase",
    "SafeKnowledgeBase",
    "StaticKnowledgeBase",
]
