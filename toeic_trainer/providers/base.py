from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class LLMProvider(ABC):
    @abstractmethod
    async def generate(self, prompt: str, temperature: float = 0.7, thinking: bool = False) -> str:
        ...

    @abstractmethod
    def name(self) -> str:
        ...


class TTSProvider(ABC):
    @abstractmethod
    async def list_voices(self) -> list[dict]:
        """Raw catalog entries with at least ``name``, ``lang`` and ``gender``."""
        ...

    @abstractmethod
    async def synthesize(
        self, text: str, output_path: Path, voice: str | None = None, rate: float = 1.0
    ) -> Path:
        ...

    @abstractmethod
    def name(self) -> str:
        ...
