from __future__ import annotations

import logging
import os
import time

import httpx

from toeic_trainer.providers.base import LLMProvider

log = logging.getLogger("toeic_trainer.llm")


class GeminiProvider(LLMProvider):
    """Google AI Studio ``generateContent`` over plain HTTP."""

    def __init__(
        self,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        api_key: str | None = None,
    ):
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY", "")
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY is not configured")
        self.model = model
        self.url = f"{base_url.rstrip('/')}/models/{model}:generateContent"

    async def generate(self, prompt: str, temperature: float = 0.7, thinking: bool = False) -> str:
        log.info("── PROMPT (%s) ──\n%s", self.model, prompt)
        config: dict = {"temperature": temperature}
        if not thinking:
            config["thinkingConfig"] = {"thinkingBudget": 0}
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": config,
        }
        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=None) as client:
            resp = await client.post(
                self.url,
                params={"key": self.api_key},
                json=payload,
            )
            resp.raise_for_status()
            data = resp.json()
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError) as e:
            raise RuntimeError(f"Unexpected Gemini response: {data!r:.300}") from e
        text = "".join(p.get("text", "") for p in parts)
        log.info("── RESPONSE (%.1fs) ──\n%s", time.monotonic() - t0, text)
        return text

    def name(self) -> str:
        return f"gemini/{self.model}"
