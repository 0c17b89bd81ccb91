"""Gemini oracle client over the Generative Language REST API."""

from __future__ import annotations

import os
from typing import Any

import httpx
import structlog

from ela.core.config import SummarizerConfig, get_settings
from ela.summarize.exceptions import (
    OracleConfigError,
    OracleHTTPError,
    OracleTransportError,
)
from ela.summarize.oracle import OracleClient

logger = structlog.stdlib.get_logger()

DEFAULT_MODEL = "gemini-1.5-flash"


def _response_text(body: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(str(p.get("text", "")) for p in parts if isinstance(p, dict))


class GeminiClient(OracleClient):
    """Calls ``models/{model}:generateContent`` with an API key.

    The key comes from config, falling back to ``GEMINI_API_KEY``; the model
    from config, falling back to ``GEMINI_MODEL`` then ``gemini-1.5-flash``.
    The overall deadline is enforced by the summarizer, which cancels the
    in-flight request.
    """

    def __init__(
        self,
        config: SummarizerConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        cfg = config or get_settings().summarizer
        self._api_key = cfg.api_key.get_secret_value() or os.getenv("GEMINI_API_KEY", "")
        if not self._api_key:
            raise OracleConfigError(
                "Gemini API key not set", hint="set summarizer.api_key or GEMINI_API_KEY"
            )
        self._model = cfg.model or os.getenv("GEMINI_MODEL", "") or DEFAULT_MODEL
        self._base_url = cfg.base_url.rstrip("/")
        self._temperature = cfg.temperature
        self._http = http or httpx.AsyncClient(timeout=httpx.Timeout(cfg.timeout_secs))

    @property
    def model(self) -> str:
        return self._model

    async def generate(self, prompt: str) -> str:
        url = f"{self._base_url}/models/{self._model}:generateContent"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": self._temperature},
        }
        try:
            response = await self._http.post(
                url, json=payload, headers={"x-goog-api-key": self._api_key}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise OracleHTTPError(
                exc.response.status_code, exc.response.text[:200]
            ) from exc
        except httpx.HTTPError as exc:
            raise OracleTransportError(f"Gemini request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            logger.warning("gemini_invalid_json_envelope", model=self._model)
            return response.text
        return _response_text(body) if isinstance(body, dict) else ""

    async def close(self) -> None:
        if not self._http.is_closed:
            await self._http.aclose()
