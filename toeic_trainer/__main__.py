"""CLI entry point for toeic-trainer.

Usage:
  python -m toeic_trainer serve [--port PORT] [--host HOST]
  python -m toeic_trainer stop
  python -m toeic_trainer restart [--port PORT]
  python -m toeic_trainer status
  python -m toeic_trainer generate MODE
  python -m toeic_trainer vocab
  python -m toeic_trainer voices
"""
from __future__ import annotations

import asyncio
import json
import os
import signal
import sys
from pathlib import Path

PID_FILE = Path(__file__).resolve().parent.parent / ".server.pid"


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"

    if command == "serve":
        _serve(args[1:])
    elif command == "stop":
        _stop()
    elif command == "restart":
        _restart(args[1:])
    elif command == "status":
        _status()
    elif command == "generate":
        _generate(args[1:])
    elif command == "vocab":
        _vocab()
    elif command == "voices":
        _voices()
    else:
        print(f"Unknown command: {command}")
        print("Commands: serve, stop, restart, status, generate, vocab, voices")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _read_pid() -> int | None:
    """Read PID from file, return None if stale or missing."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None


def _stop() -> bool:
    """Stop a running server. Returns True if a server was stopped."""
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return False
    try:
        os.kill(pid, signal.SIGTERM)
        print(f"Stopped server (PID {pid}).")
        return True
    except ProcessLookupError:
        print("Server was not running (stale PID file removed).")
        return False
    finally:
        PID_FILE.unlink(missing_ok=True)


def _status():
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
    else:
        print(f"Server is running (PID {pid}).")


def _restart(args: list[str]):
    import time
    _stop()
    time.sleep(1)
    _serve(args)


def _serve(args: list[str]):
    import uvicorn

    existing = _read_pid()
    if existing is not None:
        print(f"Server already running (PID {existing}). Use 'restart' or 'stop' first.")
        sys.exit(1)

    port = int(_parse_flag(args, "--port", "8766"))
    host = _parse_flag(args, "--host", "127.0.0.1")
    PID_FILE.write_text(str(os.getpid()))

    print(f"Starting TOEIC Trainer on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")
    try:
        uvicorn.run(
            "toeic_trainer.app:app",
            host=host,
            port=port,
            reload=False,
            timeout_graceful_shutdown=5,
        )
    finally:
        PID_FILE.unlink(missing_ok=True)


def _generate(args: list[str]):
    from toeic_trainer.config import load_settings
    from toeic_trainer.models import PracticeMode
    from toeic_trainer.providers.factory import build_llm
    from toeic_trainer.session import PracticeSession

    modes = ", ".join(m.value for m in PracticeMode)
    if not args:
        print(f"Usage: generate MODE  (one of: {modes})")
        sys.exit(1)
    try:
        mode = PracticeMode(args[0])
    except ValueError:
        print(f"Unknown mode: {args[0]} (one of: {modes})")
        sys.exit(1)

    settings = load_settings()
    session = PracticeSession(llm=build_llm(settings), language=settings.explanation_language)
    print(f"Generating {mode.value} practice using {settings.llm_provider}...")
    artifact = asyncio.run(session.regenerate(mode))
    if artifact is None:
        print(session.slot(mode).notice)
        sys.exit(1)
    print(json.dumps(artifact.to_dict(), indent=2, ensure_ascii=False))


def _vocab():
    from toeic_trainer.config import load_settings
    from toeic_trainer.db import Database
    from toeic_trainer.vocabulary import VocabularyStore

    settings = load_settings()
    db = Database(settings.db_full_path)
    items = VocabularyStore(db).load_all()
    print(f"Vocabulary notebook: {len(items)} words")
    print("=" * 40)
    for item in items:
        d = item.definition
        print(f"{item.word} ({d.part_of_speech}) {d.meaning}")
        print(f"    {d.example}")
    db.close()


def _voices():
    from toeic_trainer.config import load_settings
    from toeic_trainer.db import Database
    from toeic_trainer.models import VoiceAssignment
    from toeic_trainer.providers.factory import build_tts
    from toeic_trainer.speech import EdgeSpeechEngine
    from toeic_trainer.voices import VoiceRegistry

    settings = load_settings()
    db = Database(settings.db_full_path)
    engine = EdgeSpeechEngine(build_tts(settings), db, settings.audio_cache_full_path,
                              player=settings.audio_player)
    registry = VoiceRegistry(
        engine,
        language=settings.voice_language,
        assignment=VoiceAssignment(settings.male_voice or None, settings.female_voice or None),
    )
    registry.attach()
    asyncio.run(engine.load_voices())
    registry.close()

    for v in registry.list_voices():
        print(f"  {v.name:40s} {v.lang:8s} {v.gender}")
    print(f"\nMan:   {registry.assignment.male}")
    print(f"Woman: {registry.assignment.female}")
    if not engine.available:
        print(f"(audio player '{settings.audio_player}' not found; playback unavailable)")
    db.close()


if __name__ == "__main__":
    main()
