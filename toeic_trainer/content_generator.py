"""Ask the LLM for practice content and turn its JSON into typed artifacts."""
from __future__ import annotations

import json
import logging
import re
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from toeic_trainer.models import (
    Artifact,
    ListeningData,
    MockData,
    PracticeMode,
    Question,
    ReadingData,
    SpeakerLine,
    WordDefinition,
    WritingData,
)
from toeic_trainer.prompts import (
    FEEDBACK_PROMPT,
    LISTENING_PROMPT,
    MOCK_PROMPT,
    READING_PROMPT,
    WORD_PROMPT,
    WRITING_PROMPT,
)

if TYPE_CHECKING:
    from toeic_trainer.providers.base import LLMProvider

_log = logging.getLogger("toeic_trainer.gen")

MAX_RETRIES = 3
SPEAKERS = ("Man", "Woman")


class GenerationError(Exception):
    """The provider failed or never produced a conforming response."""


class InvalidResponse(ValueError):
    pass


def _extract_json(text: str) -> dict | None:
    """Extract a JSON object from an LLM response.

    ``<think>`` blocks are dropped first. Code-fenced JSON wins; otherwise
    the last balanced ``{…}`` block that parses is used.
    """
    text = re.sub(r"<think>.*?</think>", "", text, flags=re.DOTALL).strip()

    m = re.search(r"```(?:json)?\s*\n?({.*?})\s*\n?```", text, re.DOTALL)
    if m:
        try:
            return json.loads(m.group(1))
        except json.JSONDecodeError:
            pass

    for candidate in reversed(_find_json_objects(text)):
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    return None


def _find_json_objects(text: str) -> list[str]:
    """Find balanced top-level ``{…}`` substrings in *text*."""
    results: list[str] = []
    i = 0
    while i < len(text):
        if text[i] != "{":
            i += 1
            continue
        depth = 0
        in_str = False
        escape = False
        for j in range(i, len(text)):
            ch = text[j]
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_str = not in_str
            elif in_str:
                continue
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    results.append(text[i : j + 1])
                    i = j + 1
                    break
        else:
            # Unbalanced; skip this opening brace
            i += 1
    return results


# ── Validation ───────────────────────────────────────────────────────────

def _require(data: dict, *fields: str) -> None:
    missing = [f for f in fields if f not in data]
    if missing:
        raise InvalidResponse(f"missing fields: {', '.join(missing)}")
    for f in fields:
        if isinstance(data[f], str) and not data[f].strip():
            raise InvalidResponse(f"field '{f}' is empty")


def _parse_questions(raw: Any) -> list[Question]:
    if not isinstance(raw, list) or not raw:
        raise InvalidResponse("questions must be a non-empty list")
    questions: list[Question] = []
    seen: set[int] = set()
    for i, q in enumerate(raw):
        if not isinstance(q, dict):
            raise InvalidResponse(f"question[{i}]: expected object, got {type(q).__name__}")
        _require(q, "id", "text", "options", "answer", "explanation")
        qid = q["id"]
        # Coerce "1" -> 1 (common LLM mistake)
        if isinstance(qid, str) and qid.strip().isdigit():
            qid = int(qid.strip())
        if not isinstance(qid, int) or isinstance(qid, bool):
            raise InvalidResponse(f"question[{i}]: id not an int (got {qid!r})")
        if qid in seen:
            raise InvalidResponse(f"duplicate question id {qid}")
        seen.add(qid)
        options = q["options"]
        if not isinstance(options, list) or len(options) < 2:
            raise InvalidResponse(f"question[{i}]: options must be a list of at least 2")
        questions.append(Question(
            id=qid,
            text=str(q["text"]),
            options=[str(o) for o in options],
            answer=str(q["answer"]).strip(),
            explanation=str(q["explanation"]),
        ))
    return questions


def parse_reading(data: dict) -> ReadingData:
    _require(data, "title", "content", "translation", "questions")
    return ReadingData(
        title=str(data["title"]),
        content=str(data["content"]),
        translation=str(data["translation"]),
        questions=_parse_questions(data["questions"]),
    )


def parse_listening(data: dict) -> ListeningData:
    _require(data, "topic", "script", "questions")
    script = data["script"]
    if not isinstance(script, list) or not script:
        raise InvalidResponse("script must be a non-empty list")
    lines = []
    for i, line in enumerate(script):
        if not isinstance(line, dict):
            raise InvalidResponse(f"script[{i}]: expected object")
        _require(line, "speaker", "text")
        speaker = str(line["speaker"]).strip().capitalize()
        if speaker not in SPEAKERS:
            raise InvalidResponse(f"script[{i}]: speaker must be Man or Woman (got {line['speaker']!r})")
        lines.append(SpeakerLine(speaker=speaker, text=str(line["text"])))
    return ListeningData(
        topic=str(data["topic"]),
        script=lines,
        questions=_parse_questions(data["questions"]),
    )


def parse_writing(data: dict) -> WritingData:
    _require(data, "prompt", "suggestion")
    return WritingData(prompt=str(data["prompt"]), suggestion=str(data["suggestion"]))


def parse_mock(data: dict) -> MockData:
    _require(data, "p1_title", "p1_content", "p2_title", "p2_content", "questions")
    return MockData(
        p1_title=str(data["p1_title"]),
        p1_content=str(data["p1_content"]),
        p2_title=str(data["p2_title"]),
        p2_content=str(data["p2_content"]),
        questions=_parse_questions(data["questions"]),
    )


def parse_definition(data: dict) -> WordDefinition:
    _require(data, "meaning", "partOfSpeech", "example", "exampleTranslation")
    return WordDefinition.from_dict(data)


# ── Orchestration ────────────────────────────────────────────────────────

async def _fetch(llm: LLMProvider, base_prompt: str, parse: Callable[[dict], Any], label: str):
    """Call the LLM until *parse* accepts its JSON, feeding errors back."""
    prompt = base_prompt
    last_error = "no response"
    for attempt in range(MAX_RETRIES):
        _log.info("Generate %s (attempt %d/%d)", label, attempt + 1, MAX_RETRIES)
        try:
            response = await llm.generate(prompt, temperature=0.7)
        except Exception as e:
            last_error = f"provider error: {e}"
            _log.warning("  %s: %s", label, last_error)
            continue
        if not response or not response.strip():
            last_error = "empty response"
            _log.info("  %s: empty response", label)
            continue
        data = _extract_json(response)
        if data is None:
            last_error = "no valid JSON"
            prompt = base_prompt + "\n\nYour response did not contain valid JSON. Respond with ONLY a JSON object, no other text."
            _log.info("  %s: no valid JSON, feeding back", label)
            _log.debug("  Raw response: %.300s", response)
            continue
        try:
            result = parse(data)
        except InvalidResponse as e:
            last_error = str(e)
            prompt = base_prompt + f"\n\nYour previous response had errors: {e}\nPlease fix and respond with corrected JSON only."
            _log.info("  %s: %s, feeding back", label, e)
            continue
        _log.info("  %s OK (%s)", label, llm.name())
        return result
    raise GenerationError(f"{label} generation failed after {MAX_RETRIES} attempts: {last_error}")


async def generate_reading(llm: LLMProvider, language: str = "Japanese") -> ReadingData:
    return await _fetch(llm, READING_PROMPT.format(language=language), parse_reading, "reading")


async def generate_listening(llm: LLMProvider, language: str = "Japanese") -> ListeningData:
    return await _fetch(llm, LISTENING_PROMPT.format(language=language), parse_listening, "listening")


async def generate_writing(llm: LLMProvider, language: str = "Japanese") -> WritingData:
    return await _fetch(llm, WRITING_PROMPT.format(language=language), parse_writing, "writing")


async def generate_mock(llm: LLMProvider, language: str = "Japanese") -> MockData:
    return await _fetch(llm, MOCK_PROMPT.format(language=language), parse_mock, "mock")


GENERATORS: dict[PracticeMode, Callable[..., Awaitable[Artifact]]] = {
    PracticeMode.READING: generate_reading,
    PracticeMode.LISTENING: generate_listening,
    PracticeMode.WRITING: generate_writing,
    PracticeMode.MOCK: generate_mock,
}


async def generate_artifact(llm: LLMProvider, mode: PracticeMode, language: str = "Japanese") -> Artifact:
    return await GENERATORS[mode](llm, language=language)


async def explain_word(llm: LLMProvider, word: str, language: str = "Japanese") -> WordDefinition:
    return await _fetch(
        llm, WORD_PROMPT.format(word=word, language=language), parse_definition, f"definition of '{word}'"
    )


async def correct_writing(llm: LLMProvider, essay: str, language: str = "Japanese") -> str:
    """Free-form critique of an essay draft."""
    try:
        response = await llm.generate(FEEDBACK_PROMPT.format(essay=essay, language=language), temperature=0.7)
    except Exception as e:
        raise GenerationError(f"writing feedback failed: {e}") from e
    if not response or not response.strip():
        raise GenerationError("writing feedback failed: empty response")
    return response.strip()
