from __future__ import annotations

from pathlib import Path

from toeic_trainer.providers.base import TTSProvider


def rate_to_percent(rate: float) -> str:
    """1.0 -> "+0%", 1.25 -> "+25%", 0.8 -> "-20%"."""
    pct = round((rate - 1.0) * 100)
    return f"{pct:+d}%"


class EdgeTTSProvider(TTSProvider):
    def __init__(self, default_voice: str = "en-US-GuyNeural"):
        self.default_voice = default_voice

    async def list_voices(self) -> list[dict]:
        import edge_tts

        voices = await edge_tts.list_voices()
        return [
            {
                "name": v["ShortName"],
                "lang": v["Locale"],
                "gender": v.get("Gender", "").lower() or "unknown",
            }
            for v in voices
        ]

    async def synthesize(
        self, text: str, output_path: Path, voice: str | None = None, rate: float = 1.0
    ) -> Path:
        import edge_tts

        communicate = edge_tts.Communicate(
            text, voice or self.default_voice, rate=rate_to_percent(rate)
        )
        await communicate.save(str(output_path))
        return output_path

    def name(self) -> str:
        return "edge-tts"
