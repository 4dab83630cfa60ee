from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULTS = {
    "llm_provider": "gemini",
    "llm_model": "gemini-2.5-flash",
    "gemini_api_base": "https://generativelanguage.googleapis.com/v1beta",
    "ollama_url": "http://localhost:11434",
    "llm_thinking": False,
    "explanation_language": "Japanese",
    "tts_provider": "edge-tts",
    "voice_language": "en",
    "speech_lang": "en-US",
    "speech_rate": 1.0,
    "male_voice": "",
    "female_voice": "",
    "audio_player": "ffplay",
    "audio_cache_dir": "audio_cache",
    "db_path": "trainer.db",
}


@dataclass
class Settings:
    llm_provider: str = DEFAULTS["llm_provider"]
    llm_model: str = DEFAULTS["llm_model"]
    gemini_api_base: str = DEFAULTS["gemini_api_base"]
    ollama_url: str = DEFAULTS["ollama_url"]
    llm_thinking: bool = DEFAULTS["llm_thinking"]
    explanation_language: str = DEFAULTS["explanation_language"]
    tts_provider: str = DEFAULTS["tts_provider"]
    voice_language: str = DEFAULTS["voice_language"]
    speech_lang: str = DEFAULTS["speech_lang"]
    speech_rate: float = DEFAULTS["speech_rate"]
    male_voice: str = DEFAULTS["male_voice"]
    female_voice: str = DEFAULTS["female_voice"]
    audio_player: str = DEFAULTS["audio_player"]
    audio_cache_dir: str = DEFAULTS["audio_cache_dir"]
    db_path: str = DEFAULTS["db_path"]

    @property
    def project_root(self) -> Path:
        return Path(__file__).resolve().parent.parent

    @property
    def db_full_path(self) -> Path:
        return self.project_root / self.db_path

    @property
    def audio_cache_full_path(self) -> Path:
        return self.project_root / self.audio_cache_dir

    def to_dict(self) -> dict:
        return {
            "llm_provider": self.llm_provider,
            "llm_model": self.llm_model,
            "gemini_api_base": self.gemini_api_base,
            "ollama_url": self.ollama_url,
            "llm_thinking": self.llm_thinking,
            "explanation_language": self.explanation_language,
            "tts_provider": self.tts_provider,
            "voice_language": self.voice_language,
            "speech_lang": self.speech_lang,
            "speech_rate": self.speech_rate,
            "male_voice": self.male_voice,
            "female_voice": self.female_voice,
            "audio_player": self.audio_player,
            "audio_cache_dir": self.audio_cache_dir,
            "db_path": self.db_path,
        }


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")
