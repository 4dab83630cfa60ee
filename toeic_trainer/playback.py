"""Sequential, cancellable playback of a listening dialogue."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from toeic_trainer.models import SpeakerLine, UtteranceJob, VoiceAssignment

if TYPE_CHECKING:
    from toeic_trainer.speech import SpeechEngine

log = logging.getLogger("toeic_trainer.playback")


class PlaybackState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"


@dataclass
class PlaybackRun:
    id: int
    jobs: list[UtteranceJob]
    spoken: int = 0


class PlaybackScheduler:
    """Plays one run at a time; utterance N+1 starts only after N completes.

    ``start`` while a run is playing is rejected rather than queued.
    ``stop`` returns to IDLE synchronously and the stopped run never reports
    completion.
    """

    def __init__(self, engine: SpeechEngine, lang: str = "en-US", rate: float = 1.0):
        self.engine = engine
        self.lang = lang
        self.rate = rate
        self.state = PlaybackState.IDLE
        self.current_run: PlaybackRun | None = None
        self.unavailable = False
        self._task: asyncio.Task | None = None
        self._run_ids = 0
        self._finished_callbacks: list[Callable[[PlaybackRun], None]] = []

    def on_finished(self, callback: Callable[[PlaybackRun], None]) -> None:
        self._finished_callbacks.append(callback)

    def build_jobs(self, lines: list[SpeakerLine], assignment: VoiceAssignment) -> list[UtteranceJob]:
        # Names are resolved against the catalog now; it may have changed
        # since the assignment was made.
        catalog = {v.name for v in self.engine.voices()}
        jobs = []
        for line in lines:
            name = assignment.for_speaker(line.speaker)
            jobs.append(UtteranceJob(
                line=line,
                voice=name if name in catalog else None,
                rate=self.rate,
                lang=self.lang,
            ))
        return jobs

    def start(self, lines: list[SpeakerLine], assignment: VoiceAssignment) -> bool:
        """Begin a run. Returns False when nothing was started."""
        if self.state is PlaybackState.PLAYING:
            log.info("Playback already running (run %d), ignoring start", self.current_run.id)
            return False
        if not lines:
            return False
        if not self.engine.available:
            if not self.unavailable:
                log.warning("Speech output is unavailable; listening audio disabled")
                self.unavailable = True
            return False

        self._run_ids += 1
        run = PlaybackRun(id=self._run_ids, jobs=self.build_jobs(lines, assignment))
        self.current_run = run
        self.state = PlaybackState.PLAYING
        self._task = asyncio.get_running_loop().create_task(self._play(run))
        log.info("Run %d: playing %d lines", run.id, len(run.jobs))
        return True

    async def _play(self, run: PlaybackRun) -> None:
        for job in run.jobs:
            try:
                await self.engine.speak(job)
            except Exception as e:
                log.warning("Run %d: utterance %d failed: %s", run.id, run.spoken + 1, e)
            if self.current_run is not run:
                return
            run.spoken += 1
        self._finish(run)

    def _finish(self, run: PlaybackRun) -> None:
        if self.current_run is not run:
            return
        self.current_run = None
        self._task = None
        self.state = PlaybackState.IDLE
        log.info("Run %d: finished", run.id)
        for cb in list(self._finished_callbacks):
            cb(run)

    def stop(self) -> None:
        if self.state is PlaybackState.IDLE:
            return
        run, task = self.current_run, self._task
        self.current_run = None
        self._task = None
        self.state = PlaybackState.IDLE
        self.engine.cancel()
        if task is not None and not task.done():
            task.cancel()
        log.info("Run %d: stopped after %d/%d lines", run.id, run.spoken, len(run.jobs))

    async def wait(self) -> None:
        """Wait until the current run (if any) ends, naturally or not."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})
