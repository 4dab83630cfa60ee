"""FastAPI application with all routes."""
from __future__ import annotations

import asyncio
import logging

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse

from toeic_trainer.audio import get_or_create_audio
from toeic_trainer.config import Settings, load_settings, save_settings
from toeic_trainer.db import Database
from toeic_trainer.models import ListeningData, PracticeMode, ReadingData, VoiceAssignment
from toeic_trainer.playback import PlaybackScheduler
from toeic_trainer.providers.factory import build_llm, build_tts
from toeic_trainer.session import NoArtifact, PracticeSession
from toeic_trainer.speech import EdgeSpeechEngine, SpeechEngine
from toeic_trainer.vocabulary import LookupFailed, VocabularyStore, admit_word
from toeic_trainer.voices import VoiceRegistry

app = FastAPI(title="TOEIC Trainer")

# Global state (initialized in startup)
_db: Database | None = None
_settings: Settings | None = None
_session: PracticeSession | None = None
_engine: SpeechEngine | None = None
_registry: VoiceRegistry | None = None
_scheduler: PlaybackScheduler | None = None
_vocab: VocabularyStore | None = None

_bg_tasks: set[asyncio.Task] = set()

LLM_KEYS = {"llm_provider", "llm_model", "gemini_api_base", "ollama_url"}


def get_db() -> Database:
    assert _db is not None
    return _db


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


def get_registry() -> VoiceRegistry:
    assert _registry is not None
    return _registry


def get_scheduler() -> PlaybackScheduler:
    assert _scheduler is not None
    return _scheduler


def get_vocab() -> VocabularyStore:
    assert _vocab is not None
    return _vocab


def _get_llm():
    try:
        return build_llm(get_settings())
    except ValueError as e:
        raise HTTPException(503, str(e))


def _get_tts():
    return build_tts(get_settings())


def get_session() -> PracticeSession:
    global _session
    if _session is None:
        _session = PracticeSession(llm=_get_llm(), language=get_settings().explanation_language)
    return _session


def _mode(mode: str) -> PracticeMode:
    try:
        return PracticeMode(mode)
    except ValueError:
        raise HTTPException(404, f"Unknown practice mode: {mode}")


@app.on_event("startup")
async def startup():
    global _db, _settings, _engine, _registry, _scheduler, _vocab
    if _db is not None:
        return  # Already initialized (e.g. by tests)
    _settings = load_settings()
    _db = Database(_settings.db_full_path)
    _vocab = VocabularyStore(_db)
    _engine = EdgeSpeechEngine(
        _get_tts(), _db, _settings.audio_cache_full_path, player=_settings.audio_player
    )
    _registry = VoiceRegistry(
        _engine,
        language=_settings.voice_language,
        assignment=VoiceAssignment(_settings.male_voice or None, _settings.female_voice or None),
    )
    _registry.attach()
    _scheduler = PlaybackScheduler(_engine, lang=_settings.speech_lang, rate=_settings.speech_rate)

    # Voices arrive asynchronously; the registry re-assigns when they do.
    task = asyncio.create_task(_engine.load_voices())
    _bg_tasks.add(task)
    task.add_done_callback(_bg_tasks.discard)


@app.on_event("shutdown")
async def shutdown():
    if _scheduler:
        _scheduler.stop()
    if _registry:
        _registry.close()
    if _db:
        _db.close()


# ── API: Practice content ─────────────────────────────────────────────────

@app.get("/api/practice/{mode}")
async def api_practice_get(mode: str):
    return get_session().slot(_mode(mode)).to_dict()


@app.post("/api/practice/{mode}/generate")
async def api_practice_generate(mode: str):
    m = _mode(mode)
    session = get_session()
    if m is PracticeMode.LISTENING:
        get_scheduler().stop()
    artifact = await session.regenerate(m)
    slot = session.slot(m)
    if artifact is None:
        if slot.notice:
            raise HTTPException(502, slot.notice)
        # Superseded by a newer request for the same mode
        raise HTTPException(409, "A newer generation request replaced this one")
    return slot.to_dict()


@app.post("/api/practice/{mode}/select")
async def api_practice_select(mode: str, request: Request):
    body = await request.json()
    try:
        question_id = int(body["question_id"])
        option = str(body["option"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(400, "question_id and option are required")
    try:
        stored = get_session().select(_mode(mode), question_id, option)
    except NoArtifact:
        raise HTTPException(409, "Nothing generated for this mode yet")
    return {"question_id": question_id, "answer": stored}


@app.post("/api/practice/{mode}/check")
async def api_practice_check(mode: str):
    try:
        result = get_session().check(_mode(mode))
    except NoArtifact:
        raise HTTPException(409, "Nothing generated for this mode yet")
    return result.to_dict()


@app.post("/api/practice/reading/translation")
async def api_reading_translation():
    try:
        shown = get_session().toggle_translation()
    except NoArtifact:
        raise HTTPException(409, "Nothing generated for reading yet")
    artifact = get_session().slot(PracticeMode.READING).artifact
    assert isinstance(artifact, ReadingData)
    return {"show_translation": shown, "translation": artifact.translation if shown else None}


@app.post("/api/practice/writing/feedback")
async def api_writing_feedback(request: Request):
    body = await request.json()
    text = str(body.get("text", ""))
    if not text.strip():
        raise HTTPException(400, "No essay text provided")
    session = get_session()
    try:
        feedback = await session.submit_writing(text)
    except NoArtifact:
        raise HTTPException(409, "Nothing generated for writing yet")
    if feedback is None:
        raise HTTPException(502, session.slot(PracticeMode.WRITING).notice or "Feedback discarded")
    return {"feedback": feedback}


# ── API: Voices ───────────────────────────────────────────────────────────

def _voices_payload() -> dict:
    reg = get_registry()
    return {
        "voices": [{"name": v.name, "lang": v.lang, "gender": v.gender} for v in reg.list_voices()],
        "assignment": {"male": reg.assignment.male, "female": reg.assignment.female},
    }


@app.get("/api/voices")
async def api_voices():
    return _voices_payload()


@app.post("/api/voices/refresh")
async def api_voices_refresh():
    assert _engine is not None
    await _engine.load_voices()
    return _voices_payload()


@app.put("/api/voices")
async def api_voices_assign(request: Request):
    body = await request.json()
    try:
        assignment = get_registry().assign(male=body.get("male"), female=body.get("female"))
    except ValueError as e:
        raise HTTPException(400, str(e))
    s = get_settings()
    s.male_voice = assignment.male or ""
    s.female_voice = assignment.female or ""
    save_settings(s)
    return _voices_payload()


# ── API: Listening playback ───────────────────────────────────────────────

def _listening() -> ListeningData:
    artifact = get_session().slot(PracticeMode.LISTENING).artifact
    if not isinstance(artifact, ListeningData):
        raise HTTPException(409, "Nothing generated for listening yet")
    return artifact


def _playback_status() -> dict:
    sched = get_scheduler()
    run = sched.current_run
    return {
        "state": sched.state.value,
        "run_id": run.id if run else None,
        "spoken": run.spoken if run else 0,
        "total": len(run.jobs) if run else 0,
        "unavailable": sched.unavailable,
    }


@app.post("/api/listening/play")
async def api_listening_play():
    started = get_scheduler().start(_listening().script, get_registry().assignment)
    return {"started": started, **_playback_status()}


@app.post("/api/listening/stop")
async def api_listening_stop():
    get_scheduler().stop()
    return _playback_status()


@app.get("/api/listening/status")
async def api_listening_status():
    return _playback_status()


@app.get("/api/listening/lines/{index}.mp3")
async def api_listening_line_audio(index: int):
    """Audio for a single dialogue line, for clients that play it themselves."""
    script = _listening().script
    if not 0 <= index < len(script):
        raise HTTPException(404, "No such line")
    job = get_scheduler().build_jobs([script[index]], get_registry().assignment)[0]
    s = get_settings()
    path = await get_or_create_audio(
        job.line.text, _get_tts(), get_db(), s.audio_cache_full_path,
        voice=job.voice, rate=job.rate,
    )
    if path is None:
        raise HTTPException(502, "TTS generation failed")
    return FileResponse(path, media_type="audio/mpeg")


# ── API: Vocabulary ───────────────────────────────────────────────────────

@app.get("/api/vocab")
async def api_vocab():
    return [item.to_dict() for item in get_vocab().load_all()]


@app.post("/api/vocab/lookup")
async def api_vocab_lookup(request: Request):
    body = await request.json()
    word = admit_word(str(body.get("word", "")))
    if word is None:
        return {"ignored": True}
    try:
        item, added = await get_vocab().lookup(
            _get_llm(), word, language=get_settings().explanation_language
        )
    except LookupFailed as e:
        raise HTTPException(502, f"Could not look up '{word}': {e}")
    return {"ignored": False, "added": added, **item.to_dict()}


@app.delete("/api/vocab/{word}")
async def api_vocab_delete(word: str):
    return {"word": word, "removed": get_vocab().remove(word)}


# ── API: Settings ─────────────────────────────────────────────────────────

@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


@app.put("/api/settings")
async def api_update_settings(request: Request):
    body = await request.json()
    s = get_settings()
    known = {f.name for f in Settings.__dataclass_fields__.values()}
    for k, v in body.items():
        if k in known:
            setattr(s, k, v)
    save_settings(s)

    sched = get_scheduler()
    sched.rate = s.speech_rate
    sched.lang = s.speech_lang
    reg = get_registry()
    if reg.language != s.voice_language:
        reg.language = s.voice_language
        reg.refresh()
    if _session is not None:
        _session.language = s.explanation_language
        if LLM_KEYS & body.keys():
            _session.llm = _get_llm()
    return s.to_dict()
