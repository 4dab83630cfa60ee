"""Voice discovery and default Man/Woman voice assignment.

Voice catalogs differ per platform and carry little trustworthy gender
metadata, so the default assignment is a best-effort name heuristic whose
final fallback is always the first available voice.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from toeic_trainer.models import Voice, VoiceAssignment

if TYPE_CHECKING:
    from toeic_trainer.speech import SpeechEngine

log = logging.getLogger("toeic_trainer.voices")

MALE_MARKERS = ("Male", "David", "Guy")
FEMALE_MARKERS = ("Female", "Zira", "Jenny", "Aria", "Google US English")


def _looks_male(v: Voice) -> bool:
    return v.gender == "male" or any(m in v.name for m in MALE_MARKERS)


def _looks_female(v: Voice) -> bool:
    return v.gender == "female" or any(m in v.name for m in FEMALE_MARKERS)


def default_assignment(
    voices: list[Voice],
    previous_male: str | None = None,
    previous_female: str | None = None,
) -> VoiceAssignment:
    """Pick Man/Woman voices, keeping previous picks that are still present.

    Female fallback order: marker match, then the first voice not named like
    the chosen male voice, then the first voice. An empty catalog leaves the
    previous assignment untouched.
    """
    if not voices:
        return VoiceAssignment(previous_male, previous_female)

    names = {v.name for v in voices}

    if previous_male in names:
        male = previous_male
    else:
        male = next((v.name for v in voices if _looks_male(v)), voices[0].name)

    if previous_female in names:
        female = previous_female
    else:
        female = next(
            (v.name for v in voices if _looks_female(v)),
            next((v.name for v in voices if v.name != male), voices[0].name),
        )

    return VoiceAssignment(male, female)


class VoiceRegistry:
    def __init__(
        self,
        engine: SpeechEngine,
        language: str = "en",
        assignment: VoiceAssignment | None = None,
    ):
        self.engine = engine
        self.language = language
        self.assignment = assignment or VoiceAssignment()
        self._attached = False

    def list_voices(self) -> list[Voice]:
        return [v for v in self.engine.voices() if v.lang.startswith(self.language)]

    def refresh(self) -> VoiceAssignment:
        voices = self.list_voices()
        self.assignment = default_assignment(
            voices, self.assignment.male, self.assignment.female
        )
        log.info(
            "Voices: %d %s* available, Man=%s, Woman=%s",
            len(voices), self.language, self.assignment.male, self.assignment.female,
        )
        return self.assignment

    def assign(self, male: str | None = None, female: str | None = None) -> VoiceAssignment:
        """Override one or both roles with a voice from the current list."""
        names = {v.name for v in self.list_voices()}
        for name in (male, female):
            if name is not None and name not in names:
                raise ValueError(f"Unknown voice: {name}")
        self.assignment = VoiceAssignment(
            male if male is not None else self.assignment.male,
            female if female is not None else self.assignment.female,
        )
        return self.assignment

    def attach(self) -> None:
        """Follow catalog changes until :meth:`close`."""
        if not self._attached:
            self.engine.subscribe(self._on_voices_changed)
            self._attached = True
        self.refresh()

    def close(self) -> None:
        if self._attached:
            self.engine.unsubscribe(self._on_voices_changed)
            self._attached = False

    def _on_voices_changed(self) -> None:
        self.refresh()
