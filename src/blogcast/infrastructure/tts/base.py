from __future__ import annotations

from abc import ABC, abstractmethod


class TTSProvider(ABC):
    """Abstract base class for TTS providers."""

    @abstractmethod
    async def synth(self, *, text: str) -> bytes:
        """Synthesise *text* and return MP3 audio."""
