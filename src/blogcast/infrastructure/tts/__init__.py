"""TTS provider implementations."""

# Re-export for easier access, e.g. `from blogcast.infrastructure.tts import OpenAIProvider`
from .base import TTSProvider
from .openai_provider import OpenAIProvider

__all__ = [
    "OpenAIProvider",
    "TTSProvider",
]
