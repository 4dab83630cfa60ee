"""Per-mode practice state: the current artifact and what the learner did with it."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from toeic_trainer.content_generator import GenerationError, correct_writing, generate_artifact
from toeic_trainer.grading import AnswerSheet, GradeResult
from toeic_trainer.models import Artifact, PracticeMode

if TYPE_CHECKING:
    from toeic_trainer.providers.base import LLMProvider

log = logging.getLogger("toeic_trainer.session")

GENERATION_NOTICE = "Content generation failed. Please try again."
FEEDBACK_NOTICE = "Essay feedback failed. Please try again."


class NoArtifact(Exception):
    """The mode has nothing generated yet."""


@dataclass
class ModeSlot:
    mode: PracticeMode
    artifact: Artifact | None = None
    sheet: AnswerSheet | None = None
    loading: bool = False
    notice: str | None = None
    show_translation: bool = False
    writing_input: str = ""
    writing_feedback: str = ""
    request_id: int = 0

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "artifact": self.artifact.to_dict() if self.artifact else None,
            "loading": self.loading,
            "notice": self.notice,
            "show_translation": self.show_translation,
            "writing_input": self.writing_input,
            "writing_feedback": self.writing_feedback,
            "selections": {str(k): v for k, v in self.sheet.selections.items()} if self.sheet else {},
            "result": self.sheet.result.to_dict() if self.sheet and self.sheet.result else None,
        }


@dataclass
class PracticeSession:
    llm: LLMProvider
    language: str = "Japanese"
    slots: dict[PracticeMode, ModeSlot] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for mode in PracticeMode:
            self.slots.setdefault(mode, ModeSlot(mode))

    def slot(self, mode: PracticeMode) -> ModeSlot:
        return self.slots[mode]

    async def regenerate(self, mode: PracticeMode) -> Artifact | None:
        """Replace the mode's artifact with freshly generated content.

        Returns None when generation failed (the slot's ``notice`` says so
        and its previous artifact is kept) or when a newer request for the
        same mode superseded this one.
        """
        slot = self.slots[mode]
        slot.request_id += 1
        token = slot.request_id
        slot.loading = True
        slot.notice = None
        try:
            artifact = await generate_artifact(self.llm, mode, language=self.language)
        except GenerationError as e:
            if token == slot.request_id:
                slot.loading = False
                slot.notice = GENERATION_NOTICE
            log.warning("%s generation failed: %s", mode.value, e)
            return None

        if token != slot.request_id:
            log.info("Discarding superseded %s response (request %d)", mode.value, token)
            return None

        slot.loading = False
        slot.artifact = artifact
        slot.sheet = AnswerSheet(artifact.questions)
        slot.show_translation = False
        slot.writing_input = ""
        slot.writing_feedback = ""
        return artifact

    def _require_artifact(self, mode: PracticeMode) -> ModeSlot:
        slot = self.slots[mode]
        if slot.artifact is None or slot.sheet is None:
            raise NoArtifact(mode.value)
        return slot

    def select(self, mode: PracticeMode, question_id: int, option: str) -> str:
        return self._require_artifact(mode).sheet.select(question_id, option)

    def check(self, mode: PracticeMode) -> GradeResult:
        return self._require_artifact(mode).sheet.check()

    def toggle_translation(self) -> bool:
        slot = self._require_artifact(PracticeMode.READING)
        slot.show_translation = not slot.show_translation
        return slot.show_translation

    async def submit_writing(self, text: str) -> str | None:
        """Ask for feedback on an essay draft. Blank drafts are ignored."""
        slot = self._require_artifact(PracticeMode.WRITING)
        if not text.strip():
            return None
        slot.writing_input = text
        artifact = slot.artifact
        slot.loading = True
        slot.notice = None
        try:
            feedback = await correct_writing(self.llm, text, language=self.language)
        except GenerationError as e:
            log.warning("Writing feedback failed: %s", e)
            if slot.artifact is artifact:
                slot.loading = False
                slot.notice = FEEDBACK_NOTICE
            return None
        if slot.artifact is not artifact:
            return None
        slot.loading = False
        slot.writing_feedback = feedback
        return feedback
