"""Tests for the database layer."""
from __future__ import annotations

from toeic_trainer.db import Database


class TestRecords:
    def test_missing_record(self, tmp_db):
        assert tmp_db.get_record("vocab_history") is None

    def test_put_and_get(self, tmp_db):
        tmp_db.put_record("vocab_history", "[]")
        assert tmp_db.get_record("vocab_history") == "[]"

    def test_put_replaces_whole_value(self, tmp_db):
        tmp_db.put_record("vocab_history", '[{"word": "a"}]')
        tmp_db.put_record("vocab_history", "[]")
        assert tmp_db.get_record("vocab_history") == "[]"
        count = tmp_db.conn.execute("SELECT COUNT(*) FROM records").fetchone()[0]
        assert count == 1

    def test_records_are_independent(self, tmp_db):
        tmp_db.put_record("a", "1")
        tmp_db.put_record("b", "2")
        tmp_db.delete_record("a")
        assert tmp_db.get_record("a") is None
        assert tmp_db.get_record("b") == "2"

    def test_persists_across_connections(self, tmp_path):
        db = Database(tmp_path / "p.db")
        db.put_record("vocab_history", "[1]")
        db.close()

        db = Database(tmp_path / "p.db")
        assert db.get_record("vocab_history") == "[1]"
        db.close()


class TestAudioCache:
    def test_miss(self, tmp_db):
        assert tmp_db.get_audio_cache("abc") is None

    def test_set_and_get(self, tmp_db):
        tmp_db.set_audio_cache("abc", "/tmp/abc.mp3", "edge-tts")
        assert tmp_db.get_audio_cache("abc") == "/tmp/abc.mp3"

    def test_overwrite(self, tmp_db):
        tmp_db.set_audio_cache("abc", "/tmp/old.mp3", "edge-tts")
        tmp_db.set_audio_cache("abc", "/tmp/new.mp3", "edge-tts")
        assert tmp_db.get_audio_cache("abc") == "/tmp/new.mp3"
