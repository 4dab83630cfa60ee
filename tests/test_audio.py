"""Tests for audio caching."""
from __future__ import annotations

from pathlib import Path

import pytest

from toeic_trainer.audio import get_or_create_audio, utterance_hash


class FakeTTS:
    """Simple fake TTS that avoids AsyncMock's `name` attribute issue."""

    def __init__(self, side_effect=None):
        self._side_effect = side_effect
        self.calls: list[tuple[str, str | None, float]] = []

    async def list_voices(self) -> list[dict]:
        return []

    async def synthesize(self, text: str, output_path: Path, voice: str | None = None, rate: float = 1.0) -> Path:
        self.calls.append((text, voice, rate))
        if self._side_effect:
            raise self._side_effect
        output_path.write_bytes(b"fake mp3 data")
        return output_path

    def name(self) -> str:
        return "fake-tts"


class TestUtteranceHash:
    def test_deterministic(self):
        assert utterance_hash("Hello", "en-US-GuyNeural") == utterance_hash("Hello", "en-US-GuyNeural")

    def test_voice_and_rate_matter(self):
        base = utterance_hash("Hello", "en-US-GuyNeural", 1.0)
        assert utterance_hash("Hello", "en-US-AriaNeural", 1.0) != base
        assert utterance_hash("Hello", "en-US-GuyNeural", 1.25) != base
        assert utterance_hash("Hello", None, 1.0) != base

    def test_hash_shape(self):
        h = utterance_hash("any text here")
        assert len(h) == 16
        assert all(c in "0123456789abcdef" for c in h)


class TestGetOrCreateAudio:
    @pytest.mark.asyncio
    async def test_creates_new_audio(self, tmp_db, tmp_path):
        tts = FakeTTS()
        result = await get_or_create_audio("Hello world", tts, tmp_db, tmp_path / "audio",
                                           voice="en-US-GuyNeural", rate=0.9)

        assert result is not None
        assert result.exists()
        assert result.suffix == ".mp3"
        assert tts.calls == [("Hello world", "en-US-GuyNeural", 0.9)]

    @pytest.mark.asyncio
    async def test_returns_cached(self, tmp_db, tmp_path):
        cache_dir = tmp_path / "audio"
        cache_dir.mkdir()
        h = utterance_hash("Hello world", "en-US-GuyNeural")
        cached_file = cache_dir / f"{h}.mp3"
        cached_file.write_bytes(b"cached data")
        tmp_db.set_audio_cache(h, str(cached_file), "fake-tts")

        tts = FakeTTS()
        result = await get_or_create_audio("Hello world", tts, tmp_db, cache_dir, voice="en-US-GuyNeural")

        assert result == cached_file
        assert tts.calls == []

    @pytest.mark.asyncio
    async def test_other_voice_not_served_from_cache(self, tmp_db, tmp_path):
        tts = FakeTTS()
        await get_or_create_audio("Hello", tts, tmp_db, tmp_path, voice="en-US-GuyNeural")
        await get_or_create_audio("Hello", tts, tmp_db, tmp_path, voice="en-US-AriaNeural")
        assert len(tts.calls) == 2

    @pytest.mark.asyncio
    async def test_regenerates_if_file_missing(self, tmp_db, tmp_path):
        h = utterance_hash("Hello world")
        # DB says it's cached, but file doesn't exist
        tmp_db.set_audio_cache(h, str(tmp_path / "nonexistent.mp3"), "fake-tts")

        tts = FakeTTS()
        result = await get_or_create_audio("Hello world", tts, tmp_db, tmp_path / "audio")

        assert result is not None
        assert result.exists()
        assert len(tts.calls) == 1

    @pytest.mark.asyncio
    async def test_tts_failure_returns_none(self, tmp_db, tmp_path):
        tts = FakeTTS(side_effect=RuntimeError("TTS unavailable"))
        result = await get_or_create_audio("Hello world", tts, tmp_db, tmp_path / "audio")
        assert result is None
        assert tmp_db.get_audio_cache(utterance_hash("Hello world")) is None
