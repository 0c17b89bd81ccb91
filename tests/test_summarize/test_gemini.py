"""Tests for GeminiClient: request shape and error mapping via httpx MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest
from pydantic import SecretStr

from ela.core.config import SummarizerConfig
from ela.summarize.exceptions import OracleConfigError, OracleHTTPError, OracleTransportError
from ela.summarize.gemini import DEFAULT_MODEL, GeminiClient


def _cfg(**kw: object) -> SummarizerConfig:
    defaults: dict[str, object] = {
        "provider": "gemini",
        "api_key": SecretStr("fake-key"),
        "model": "gemini-test",
        "base_url": "https://gemini.test/v1beta",
    }
    defaults.update(kw)
    return SummarizerConfig(**defaults)  # type: ignore[arg-type]


def _client(handler: object, **kw: object) -> GeminiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))  # type: ignore[arg-type]
    return GeminiClient(_cfg(**kw), http=http)


def _ok_body(*texts: str) -> dict[str, object]:
    return {"candidates": [{"content": {"parts": [{"text": t} for t in texts]}}]}


class TestGenerate:
    async def test_request_shape_and_text(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_ok_body('{"title":', ' "x"}'))

        client = _client(handler)
        text = await client.generate("analyze this")
        await client.close()

        assert text == '{"title": "x"}'
        request = seen[0]
        assert request.url.path == "/v1beta/models/gemini-test:generateContent"
        assert request.headers["x-goog-api-key"] == "fake-key"
        body = json.loads(request.content)
        assert body["contents"][0]["parts"][0]["text"] == "analyze this"
        assert body["generationConfig"]["temperature"] == 0.2

    async def test_empty_candidates(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"candidates": []}))
        assert await client.generate("p") == ""

    async def test_http_error_maps_status(self) -> None:
        client = _client(lambda request: httpx.Response(429, text="slow down"))
        with pytest.raises(OracleHTTPError) as exc_info:
            await client.generate("p")
        assert exc_info.value.status == 429

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection reset", request=request)

        client = _client(handler)
        with pytest.raises(OracleTransportError):
            await client.generate("p")


class TestConfiguration:
    def test_missing_key_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(OracleConfigError):
            GeminiClient(_cfg(api_key=SecretStr("")))

    def test_env_fallbacks(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        monkeypatch.setenv("GEMINI_MODEL", "gemini-env")
        client = GeminiClient(_cfg(api_key=SecretStr(""), model=""))
        assert client.model == "gemini-env"

    def test_default_model(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GEMINI_MODEL", raising=False)
        client = GeminiClient(_cfg(model=""))
        assert client.model == DEFAULT_MODEL

    async def test_close_is_idempotent(self) -> None:
        client = _client(lambda request: httpx.Response(200, json=_ok_body("x")))
        await client.close()
        await client.close()
