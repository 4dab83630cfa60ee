"""Personal vocabulary notebook built from looked-up words."""
from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from toeic_trainer.content_generator import GenerationError, explain_word
from toeic_trainer.models import VocabularyItem, WordDefinition

if TYPE_CHECKING:
    from toeic_trainer.db import Database
    from toeic_trainer.providers.base import LLMProvider

log = logging.getLogger("toeic_trainer.vocab")

RECORD_NAME = "vocab_history"
MIN_WORD_LETTERS = 3

_NON_ALPHA = re.compile(r"[^a-zA-Z]")


class LookupFailed(Exception):
    pass


def admit_word(token: str) -> str | None:
    """Letters of a clicked token, or None if fewer than three remain."""
    cleaned = _NON_ALPHA.sub("", token)
    if len(cleaned) < MIN_WORD_LETTERS:
        return None
    return cleaned


def _parse_item(raw: object) -> VocabularyItem | None:
    if not isinstance(raw, dict):
        return None
    try:
        return VocabularyItem(
            word=str(raw["word"]),
            definition=WordDefinition.from_dict(raw["definition"]),
            date=str(raw.get("date", "")),
        )
    except (KeyError, TypeError):
        return None


class VocabularyStore:
    """Most-recent-first list of words, one entry per case-insensitive word.

    The whole list is stored as one JSON record and rewritten on every
    change. Mutations never await between reading and writing it.
    """

    def __init__(self, db: Database):
        self.db = db

    def load_all(self) -> list[VocabularyItem]:
        raw = self.db.get_record(RECORD_NAME)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            log.warning("Vocabulary record is corrupt, starting empty: %s", e)
            return []
        if not isinstance(data, list):
            log.warning("Vocabulary record is not a list, starting empty")
            return []
        items = []
        for entry in data:
            item = _parse_item(entry)
            if item is None:
                log.warning("Skipping malformed vocabulary entry: %.80r", entry)
                continue
            items.append(item)
        return items

    def _save(self, items: list[VocabularyItem]) -> None:
        self.db.put_record(
            RECORD_NAME, json.dumps([i.to_dict() for i in items], ensure_ascii=False)
        )

    def get(self, word: str) -> VocabularyItem | None:
        key = word.lower()
        return next((i for i in self.load_all() if i.word.lower() == key), None)

    def record_if_absent(
        self,
        word: str,
        definition: WordDefinition,
        timestamp: str | None = None,
    ) -> bool:
        """Insert *word* at the front unless it is already present.

        Returns True if a new entry was written.
        """
        items = self.load_all()
        key = word.lower()
        if any(i.word.lower() == key for i in items):
            return False
        date = timestamp or datetime.now(timezone.utc).isoformat()
        items.insert(0, VocabularyItem(word=word, definition=definition, date=date))
        self._save(items)
        log.info("Saved '%s' (%d words)", word, len(items))
        return True

    def remove(self, word: str) -> bool:
        items = self.load_all()
        key = word.lower()
        kept = [i for i in items if i.word.lower() != key]
        if len(kept) == len(items):
            return False
        self._save(kept)
        log.info("Removed '%s' (%d words)", word, len(kept))
        return True

    async def lookup(
        self, llm: LLMProvider, word: str, language: str = "Japanese"
    ) -> tuple[VocabularyItem, bool]:
        """Define *word* via the LLM and record it if new.

        Returns the stored entry (the existing one when the word was already
        known) and whether it was newly added.
        """
        try:
            definition = await explain_word(llm, word, language=language)
        except GenerationError as e:
            raise LookupFailed(str(e)) from e
        added = self.record_if_absent(word, definition)
        item = self.get(word)
        assert item is not None
        return item, added
