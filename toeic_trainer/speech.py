"""Speech output: the voice catalog and one-at-a-time utterance playback."""
from __future__ import annotations

import asyncio
import logging
import shutil
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from toeic_trainer.audio import get_or_create_audio
from toeic_trainer.models import UtteranceJob, Voice

if TYPE_CHECKING:
    from toeic_trainer.db import Database
    from toeic_trainer.providers.base import TTSProvider

log = logging.getLogger("toeic_trainer.speech")


class SpeechEngine(ABC):
    """A single shared speech output device.

    ``speak`` returns once the utterance has finished being heard;
    ``cancel`` silences whatever is currently playing.
    """

    def __init__(self) -> None:
        self._listeners: list[Callable[[], None]] = []

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    def voices(self) -> list[Voice]:
        ...

    async def load_voices(self) -> None:
        """(Re-)enumerate the catalog. Subscribers are notified afterwards."""
        self._notify_voices_changed()

    @abstractmethod
    async def speak(self, job: UtteranceJob) -> None:
        ...

    @abstractmethod
    def cancel(self) -> None:
        ...

    def subscribe(self, callback: Callable[[], None]) -> None:
        """Register *callback* for voice-catalog changes."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_voices_changed(self) -> None:
        for cb in list(self._listeners):
            cb()


def player_command(player: str, path: Path) -> list[str]:
    if Path(player).name == "ffplay":
        return [player, "-nodisp", "-autoexit", "-loglevel", "quiet", str(path)]
    return [player, str(path)]


class EdgeSpeechEngine(SpeechEngine):
    """Synthesizes each utterance with a TTS provider and plays the file
    through a local command-line audio player."""

    def __init__(
        self,
        tts: TTSProvider,
        db: Database,
        cache_dir: Path,
        player: str = "ffplay",
    ):
        super().__init__()
        self.tts = tts
        self.db = db
        self.cache_dir = cache_dir
        self.player = player
        self._voices: list[Voice] = []
        self._proc: asyncio.subprocess.Process | None = None

    @property
    def available(self) -> bool:
        return shutil.which(self.player) is not None

    def voices(self) -> list[Voice]:
        return list(self._voices)

    async def load_voices(self) -> None:
        """Enumerate the provider's catalog and notify subscribers."""
        try:
            raw = await self.tts.list_voices()
        except Exception as e:
            log.warning("Voice enumeration failed: %s", e)
            return
        self._voices = [
            Voice(name=v["name"], lang=v["lang"], gender=v.get("gender", "unknown"))
            for v in raw
        ]
        log.info("Loaded %d voices from %s", len(self._voices), self.tts.name())
        self._notify_voices_changed()

    async def speak(self, job: UtteranceJob) -> None:
        path = await get_or_create_audio(
            job.line.text, self.tts, self.db, self.cache_dir,
            voice=job.voice, rate=job.rate,
        )
        if path is None:
            return
        proc = await asyncio.create_subprocess_exec(
            *player_command(self.player, path),
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        self._proc = proc
        try:
            await proc.wait()
        finally:
            if proc.returncode is None:
                proc.terminate()
            if self._proc is proc:
                self._proc = None

    def cancel(self) -> None:
        proc = self._proc
        self._proc = None
        if proc is not None and proc.returncode is None:
            try:
                proc.terminate()
            except ProcessLookupError:
                pass
