"""Retry with exponential backoff for oracle calls."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx
import structlog

from ela.summarize.exceptions import (
    OracleConfigError,
    OracleTimeoutError,
    OracleTransportError,
)

logger = structlog.stdlib.get_logger()

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]

_TRANSIENT_MESSAGE_RE = re.compile(r"fetch|timeout|ECONNRESET|ETIMEDOUT", re.IGNORECASE)
# Gemini rejects a bad key with 400 INVALID_ARGUMENT rather than 401.
_API_KEY_RE = re.compile(r"api[ _-]?key", re.IGNORECASE)

_MISSING_MODEL_HINT = "model not found: check the configured summarizer model"
_BAD_CREDENTIALS_HINT = "request rejected: check the summarizer api_key"


def status_of(exc: BaseException) -> int:
    """HTTP status carried by an exception, 0 when there is none."""
    for attr in ("status", "status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else 0


def is_retriable(exc: BaseException) -> bool:
    """True for rate limiting, server errors, timeouts and transport failures."""
    if isinstance(exc, OracleConfigError):
        return False
    status = status_of(exc)
    if status == 429 or status >= 500:
        return True
    if isinstance(
        exc,
        (OracleTimeoutError, OracleTransportError, TimeoutError, ConnectionError, httpx.TransportError),
    ):
        return True
    return bool(_TRANSIENT_MESSAGE_RE.search(str(exc)))


def as_config_error(exc: BaseException) -> OracleConfigError | None:
    """Translate 404, 401/403 and bad-key 400s into a hinted configuration error."""
    if isinstance(exc, OracleConfigError):
        return exc
    status = status_of(exc)
    if status == 404:
        return OracleConfigError(str(exc), hint=_MISSING_MODEL_HINT)
    if status in (401, 403) or (status == 400 and _API_KEY_RE.search(str(exc))):
        return OracleConfigError(str(exc), hint=_BAD_CREDENTIALS_HINT)
    return None


async def with_retries(
    fn: Callable[[], Awaitable[T]],
    retries: int = 2,
    base_delay: float = 0.2,
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """Call *fn*, retrying retriable failures up to *retries* extra times.

    The delay before retry ``n`` (0-based) is ``base_delay * 2**n``.
    Configuration errors surface immediately; exhausting retries re-raises
    the last error.
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as exc:
            config_error = as_config_error(exc)
            if config_error is not None:
                if config_error is exc:
                    raise
                raise config_error from exc
            if attempt >= retries or not is_retriable(exc):
                raise
            delay = base_delay * (2**attempt)
            logger.warning(
                "oracle_retry",
                attempt=attempt + 1,
                max_retries=retries,
                delay_secs=delay,
                error=str(exc),
            )
            await sleep(delay)
            attempt += 1
