"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import json

import pytest

from toeic_trainer.db import Database
from toeic_trainer.models import (
    Question,
    SpeakerLine,
    UtteranceJob,
    Voice,
    WordDefinition,
)
from toeic_trainer.speech import SpeechEngine

READING_JSON = {
    "title": "Office Relocation Notice",
    "content": "Dear staff, our office will move to the Harbor Building on May 1.",
    "translation": "スタッフの皆様、5月1日にオフィスはハーバービルに移転します。",
    "questions": [
        {
            "id": 1,
            "text": "When will the office move?",
            "options": ["(A) May 1", "(B) June 1", "(C) April 1", "(D) July 1"],
            "answer": "A",
            "explanation": "本文に5月1日とあります。",
        },
        {
            "id": 2,
            "text": "Where is the new office?",
            "options": ["(A) City Hall", "(B) Harbor Building", "(C) Station", "(D) Airport"],
            "answer": "B",
            "explanation": "ハーバービルです。",
        },
    ],
}

LISTENING_JSON = {
    "topic": "Booking a meeting room",
    "script": [
        {"speaker": "Man", "text": "Is the conference room free at three?"},
        {"speaker": "Woman", "text": "No, but room B is available."},
        {"speaker": "Man", "text": "Great, I'll book room B then."},
    ],
    "questions": [
        {
            "id": 1,
            "text": "What does the man want?",
            "options": ["(A) A room", "(B) A meal", "(C) A taxi", "(D) A ticket"],
            "answer": "A",
            "explanation": "会議室を探しています。",
        },
    ],
}

WRITING_JSON = {
    "prompt": "Do you prefer working from home or at the office?",
    "suggestion": "理由を2つ挙げましょう。",
}

MOCK_JSON = {
    "p1_title": "Email: Order inquiry",
    "p1_content": "I ordered 20 chairs but received 15.",
    "p2_title": "Reply",
    "p2_content": "The remaining 5 chairs will ship Friday.",
    "questions": [
        {"id": 1, "text": "How many chairs were ordered?",
         "options": ["(A) 5", "(B) 15", "(C) 20", "(D) 25"], "answer": "C", "explanation": "20脚です。"},
        {"id": 2, "text": "When will the rest ship?",
         "options": ["(A) Monday", "(B) Friday", "(C) Today", "(D) Never"], "answer": "B", "explanation": "金曜日です。"},
        {"id": 3, "text": "How many are missing?",
         "options": ["(A) 5", "(B) 10", "(C) 15", "(D) 20"], "answer": "A", "explanation": "5脚不足。"},
    ],
}

DEFINITION_JSON = {
    "meaning": "延期する",
    "partOfSpeech": "v.",
    "example": "We postponed the meeting.",
    "exampleTranslation": "私たちは会議を延期した。",
}

FEEDBACK_TEXT = "Score estimate: 150/200. 文法は概ね正確です。"


class FakeLLM:
    """Answers each prompt kind with canned JSON; avoids AsyncMock's `name` issue."""

    def __init__(self, overrides: dict[str, str] | None = None):
        self.overrides = overrides or {}
        self.prompts: list[str] = []

    def _kind(self, prompt: str) -> str:
        if "Double Passage" in prompt:
            return "mock"
        if "Reading Comprehension" in prompt:
            return "reading"
        if "Listening exercise" in prompt:
            return "listening"
        if "Writing prompt" in prompt:
            return "writing"
        if "Explain the word" in prompt:
            return "word"
        return "feedback"

    async def generate(self, prompt: str, temperature: float = 0.7, thinking: bool = False) -> str:
        self.prompts.append(prompt)
        kind = self._kind(prompt)
        if kind in self.overrides:
            value = self.overrides[kind]
            if isinstance(value, Exception):
                raise value
            return value
        return {
            "reading": json.dumps(READING_JSON, ensure_ascii=False),
            "listening": json.dumps(LISTENING_JSON),
            "writing": json.dumps(WRITING_JSON, ensure_ascii=False),
            "mock": json.dumps(MOCK_JSON, ensure_ascii=False),
            "word": json.dumps(DEFINITION_JSON, ensure_ascii=False),
            "feedback": FEEDBACK_TEXT,
        }[kind]

    def name(self) -> str:
        return "fake-llm"


class FakeSpeechEngine(SpeechEngine):
    """Records utterance start/end events.

    With ``auto_complete=False`` each utterance stays audible until the test
    calls :meth:`complete_current`.
    """

    def __init__(self, voices=None, auto_complete: bool = True, available: bool = True,
                 fail_on: set[str] | None = None):
        super().__init__()
        self._voices = list(voices or [])
        self.auto_complete = auto_complete
        self._available = available
        self.fail_on = fail_on or set()
        self.events: list[tuple[str, str]] = []
        self.jobs: list[UtteranceJob] = []
        self.cancel_count = 0
        self._pending: asyncio.Event | None = None

    @property
    def available(self) -> bool:
        return self._available

    @property
    def started(self) -> list[str]:
        return [text for kind, text in self.events if kind == "start"]

    def voices(self) -> list[Voice]:
        return list(self._voices)

    def set_voices(self, voices: list[Voice]) -> None:
        self._voices = list(voices)
        self._notify_voices_changed()

    async def speak(self, job: UtteranceJob) -> None:
        self.events.append(("start", job.line.text))
        self.jobs.append(job)
        if job.line.text in self.fail_on:
            raise RuntimeError("synthesis failed")
        if self.auto_complete:
            await asyncio.sleep(0)
        else:
            self._pending = asyncio.Event()
            await self._pending.wait()
        self.events.append(("end", job.line.text))

    def complete_current(self) -> None:
        assert self._pending is not None
        self._pending.set()

    def cancel(self) -> None:
        self.cancel_count += 1


async def settle(rounds: int = 10) -> None:
    """Let ready tasks run without advancing any utterance."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def tmp_db(tmp_path):
    """Create a fresh temporary database."""
    db = Database(tmp_path / "test.db")
    yield db
    db.close()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def sample_voices():
    return [
        Voice("en-US-AriaNeural", "en-US", "female"),
        Voice("en-US-GuyNeural", "en-US", "male"),
        Voice("en-GB-RyanNeural", "en-GB", "male"),
        Voice("ja-JP-NanamiNeural", "ja-JP", "female"),
    ]


@pytest.fixture
def sample_lines():
    return [
        SpeakerLine("Man", "Line one."),
        SpeakerLine("Woman", "Line two."),
        SpeakerLine("Man", "Line three."),
    ]


@pytest.fixture
def sample_questions():
    return [
        Question(1, "Q1?", ["(A) yes", "(B) no", "(C) maybe"], "A", "because"),
        Question(2, "Q2?", ["(A) red", "(B) green", "(C) blue"], "B", "because"),
        Question(3, "Q3?", ["(A) one", "(B) two", "(C) three"], "C", "because"),
    ]


@pytest.fixture
def sample_definition():
    return WordDefinition.from_dict(DEFINITION_JSON)
