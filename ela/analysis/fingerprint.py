"""Fingerprinting — map an event to its incident grouping key."""

from __future__ import annotations

import abc

from ela.core.types import Event

UNKNOWN_FINGERPRINT = "unknown"


class Fingerprinter(abc.ABC):
    """Pure, deterministic, total: never raises and never returns ``""``."""

    @abc.abstractmethod
    def fingerprint(self, event: Event) -> str:
        """Return the grouping key for *event*."""


class FirstTokenFingerprinter(Fingerprinter):
    """Lower-cased first whitespace-delimited token of the message.

    A cheap placeholder for a real error signature (stack top + exception type).
    """

    def fingerprint(self, event: Event) -> str:
        tokens = (event.message or "").split()
        return tokens[0].lower() if tokens else UNKNOWN_FINGERPRINT
