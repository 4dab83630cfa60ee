from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum


class PracticeMode(str, Enum):
    READING = "reading"
    LISTENING = "listening"
    WRITING = "writing"
    MOCK = "mock"


@dataclass(frozen=True)
class Voice:
    name: str
    lang: str
    gender: str = "unknown"  # male | female | unknown


@dataclass(frozen=True)
class VoiceAssignment:
    male: str | None = None
    female: str | None = None

    def for_speaker(self, speaker: str) -> str | None:
        return self.male if speaker == "Man" else self.female


@dataclass(frozen=True)
class SpeakerLine:
    speaker: str  # Man | Woman
    text: str


@dataclass(frozen=True)
class UtteranceJob:
    line: SpeakerLine
    voice: str | None  # None -> engine default
    rate: float = 1.0
    lang: str = "en-US"


@dataclass
class Question:
    id: int
    text: str
    options: list[str]
    answer: str
    explanation: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ReadingData:
    title: str
    content: str
    translation: str
    questions: list[Question] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ListeningData:
    topic: str
    script: list[SpeakerLine]
    questions: list[Question] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class WritingData:
    prompt: str
    suggestion: str

    @property
    def questions(self) -> list[Question]:
        return []

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MockData:
    p1_title: str
    p1_content: str
    p2_title: str
    p2_content: str
    questions: list[Question] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


Artifact = ReadingData | ListeningData | WritingData | MockData


@dataclass
class WordDefinition:
    meaning: str
    part_of_speech: str
    example: str
    example_translation: str

    def to_dict(self) -> dict:
        return {
            "meaning": self.meaning,
            "partOfSpeech": self.part_of_speech,
            "example": self.example,
            "exampleTranslation": self.example_translation,
        }

    @classmethod
    def from_dict(cls, data: dict) -> WordDefinition:
        return cls(
            meaning=str(data["meaning"]),
            part_of_speech=str(data["partOfSpeech"]),
            example=str(data["example"]),
            example_translation=str(data["exampleTranslation"]),
        )


@dataclass
class VocabularyItem:
    word: str
    definition: WordDefinition
    date: str  # ISO-8601 lookup timestamp

    def to_dict(self) -> dict:
        return {"word": self.word, "definition": self.definition.to_dict(), "date": self.date}
