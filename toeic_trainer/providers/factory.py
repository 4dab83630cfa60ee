from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from toeic_trainer.config import Settings
    from toeic_trainer.providers.base import LLMProvider, TTSProvider


def build_llm(s: Settings) -> LLMProvider:
    if s.llm_provider == "gemini":
        from toeic_trainer.providers.llm_gemini import GeminiProvider
        return GeminiProvider(model=s.llm_model, base_url=s.gemini_api_base)
    elif s.llm_provider == "ollama":
        from toeic_trainer.providers.llm_ollama import OllamaProvider
        return OllamaProvider(base_url=s.ollama_url, model=s.llm_model)
    elif s.llm_provider == "anthropic":
        from toeic_trainer.providers.llm_anthropic import AnthropicProvider
        return AnthropicProvider(model=s.llm_model)
    elif s.llm_provider == "openai":
        from toeic_trainer.providers.llm_openai import OpenAIProvider
        return OpenAIProvider(model=s.llm_model)
    raise ValueError(f"Unknown LLM provider: {s.llm_provider}")


def build_tts(s: Settings) -> TTSProvider:
    if s.tts_provider == "edge-tts":
        from toeic_trainer.providers.tts_edge import EdgeTTSProvider
        return EdgeTTSProvider()
    raise ValueError(f"Unknown TTS provider: {s.tts_provider}")
