"""I/O boundary adapters (browser driver, chat API, TTS)."""

from .tts import OpenAIProvider, TTSProvider

__all__ = [
    "OpenAIProvider",
    "TTSProvider",
]
