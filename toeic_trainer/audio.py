"""TTS audio caching for dialogue lines."""
from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from toeic_trainer.db import Database
    from toeic_trainer.providers.base import TTSProvider

log = logging.getLogger("toeic_trainer.audio")


def utterance_hash(text: str, voice: str | None = None, rate: float = 1.0) -> str:
    key = f"{voice or ''}|{rate:.2f}|{text}"
    return hashlib.sha256(key.encode()).hexdigest()[:16]


async def get_or_create_audio(
    text: str,
    tts: TTSProvider,
    db: Database,
    cache_dir: Path,
    voice: str | None = None,
    rate: float = 1.0,
) -> Path | None:
    """Get cached audio or synthesize it with *voice* at *rate*."""
    cache_dir.mkdir(parents=True, exist_ok=True)
    h = utterance_hash(text, voice, rate)

    cached_path = db.get_audio_cache(h)
    if cached_path:
        p = Path(cached_path)
        if p.exists():
            return p

    output_path = cache_dir / f"{h}.mp3"
    try:
        await tts.synthesize(text, output_path, voice=voice, rate=rate)
        db.set_audio_cache(h, str(output_path), tts.name())
        return output_path
    except Exception as e:
        log.warning("TTS error (%s): %s", voice or "default voice", e)
        return None
