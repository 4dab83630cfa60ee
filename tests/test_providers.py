"""Tests for provider construction and the Gemini HTTP client."""
from __future__ import annotations

import json

import httpx
import pytest
from unittest.mock import patch

from toeic_trainer.config import Settings
from toeic_trainer.providers.factory import build_llm, build_tts
from toeic_trainer.providers.llm_gemini import GeminiProvider
from toeic_trainer.providers.llm_ollama import OllamaProvider
from toeic_trainer.providers.tts_edge import EdgeTTSProvider

_RealAsyncClient = httpx.AsyncClient


def _mock_client(handler):
    def factory(**kwargs):
        return _RealAsyncClient(transport=httpx.MockTransport(handler), **kwargs)
    return factory


class TestFactory:
    def test_gemini_requires_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            build_llm(Settings())

    def test_gemini(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        llm = build_llm(Settings())
        assert isinstance(llm, GeminiProvider)
        assert llm.name() == "gemini/gemini-2.5-flash"

    def test_ollama(self):
        llm = build_llm(Settings(llm_provider="ollama", llm_model="qwen3:8b"))
        assert isinstance(llm, OllamaProvider)

    def test_unknown(self):
        with pytest.raises(ValueError):
            build_llm(Settings(llm_provider="nope"))
        with pytest.raises(ValueError):
            build_tts(Settings(tts_provider="nope"))

    def test_tts(self):
        assert isinstance(build_tts(Settings()), EdgeTTSProvider)


class TestGemini:
    @pytest.mark.asyncio
    async def test_generate(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "candidates": [{"content": {"parts": [{"text": '{"a": '}, {"text": "1}"}]}}],
            })

        llm = GeminiProvider(api_key="secret")
        with patch("toeic_trainer.providers.llm_gemini.httpx.AsyncClient", _mock_client(handler)):
            text = await llm.generate("Hello", temperature=0.3)

        assert text == '{"a": 1}'
        assert "models/gemini-2.5-flash:generateContent" in seen["url"]
        assert "key=secret" in seen["url"]
        assert seen["body"]["contents"][0]["parts"][0]["text"] == "Hello"
        assert seen["body"]["generationConfig"]["temperature"] == 0.3
        assert seen["body"]["generationConfig"]["thinkingConfig"] == {"thinkingBudget": 0}

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"error": {"message": "quota"}})

        llm = GeminiProvider(api_key="secret")
        with patch("toeic_trainer.providers.llm_gemini.httpx.AsyncClient", _mock_client(handler)):
            with pytest.raises(httpx.HTTPStatusError):
                await llm.generate("Hello")

    @pytest.mark.asyncio
    async def test_blocked_response_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})

        llm = GeminiProvider(api_key="secret")
        with patch("toeic_trainer.providers.llm_gemini.httpx.AsyncClient", _mock_client(handler)):
            with pytest.raises(RuntimeError, match="Unexpected Gemini response"):
                await llm.generate("Hello")
