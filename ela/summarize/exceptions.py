"""Exception hierarchy for summarizers and the external oracle."""

from __future__ import annotations


class SummarizerError(Exception):
    """Base exception for all summarizer errors."""


class OracleError(SummarizerError):
    """The external oracle call failed."""


class OracleHTTPError(OracleError):
    """The oracle answered with a non-success HTTP status."""

    def __init__(self, status: int, message: str = "") -> None:
        self.status = status
        detail = f"oracle returned HTTP {status}"
        super().__init__(f"{detail}: {message}" if message else detail)


class OracleTransportError(OracleError):
    """Connection-level failure talking to the oracle."""


class OracleTimeoutError(OracleError):
    """The oracle did not answer before the deadline."""


class OracleConfigError(OracleError):
    """Misconfiguration (unknown model, bad credentials); never retried."""

    def __init__(self, message: str, hint: str = "") -> None:
        self.hint = hint
        super().__init__(f"{message} ({hint})" if hint else message)
