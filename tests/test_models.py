"""Tests for data models."""
from __future__ import annotations

from conftest import DEFINITION_JSON
from toeic_trainer.models import (
    ListeningData,
    PracticeMode,
    Question,
    SpeakerLine,
    VocabularyItem,
    VoiceAssignment,
    WordDefinition,
    WritingData,
)


class TestVoiceAssignment:
    def test_for_speaker(self):
        a = VoiceAssignment(male="Guy", female="Aria")
        assert a.for_speaker("Man") == "Guy"
        assert a.for_speaker("Woman") == "Aria"

    def test_unset(self):
        assert VoiceAssignment().for_speaker("Man") is None


class TestArtifacts:
    def test_listening_to_dict(self):
        data = ListeningData(
            topic="t",
            script=[SpeakerLine("Man", "Hi.")],
            questions=[Question(1, "?", ["(A) a", "(B) b"], "A", "e")],
        )
        d = data.to_dict()
        assert d["script"] == [{"speaker": "Man", "text": "Hi."}]
        assert d["questions"][0]["options"] == ["(A) a", "(B) b"]

    def test_writing_has_no_questions(self):
        w = WritingData("prompt", "tip")
        assert w.questions == []
        assert w.to_dict() == {"prompt": "prompt", "suggestion": "tip"}

    def test_mode_values(self):
        assert [m.value for m in PracticeMode] == ["reading", "listening", "writing", "mock"]


class TestVocabulary:
    def test_definition_roundtrip(self):
        d = WordDefinition.from_dict(DEFINITION_JSON)
        assert d.part_of_speech == "v."
        assert d.to_dict() == DEFINITION_JSON

    def test_item_to_dict(self, sample_definition):
        item = VocabularyItem("postpone", sample_definition, "2024-01-01T00:00:00")
        assert item.to_dict() == {
            "word": "postpone",
            "definition": DEFINITION_JSON,
            "date": "2024-01-01T00:00:00",
        }
