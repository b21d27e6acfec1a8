from __future__ import annotations

import logging

from openai import APIError, APIStatusError, AsyncOpenAI

from blogcast.errors import SynthesisError
from blogcast.infrastructure.tts.base import TTSProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(TTSProvider):
    """TTS provider for the OpenAI speech endpoint.

    Model and voice come from settings (``TTS_MODEL``, ``TTS_VOICE``); output is always MP3.
    """

    def __init__(self, client: AsyncOpenAI, model: str = "tts-1", voice: str = "nova") -> None:
        self.client = client
        self.model = model
        self.voice = voice

    async def synth(self, *, text: str) -> bytes:
        """Synthesize audio using the OpenAI TTS API.

        Raises:
            SynthesisError: On a non-2xx response or transport failure
        """
        try:
            response = await self.client.audio.speech.create(
                model=self.model,
                voice=self.voice,  # type: ignore[arg-type]
                input=text,
                response_format="mp3",
            )
        except APIStatusError as e:
            raise SynthesisError(
                f"Failed to convert text to speech: {e.status_code}: {e.response.text}"
            ) from e
        except APIError as e:
            raise SynthesisError(f"Failed to convert text to speech: {e}") from e

        audio = response.content
        logger.debug(f"Synthesized {len(text)} chars into {len(audio)} bytes with voice {self.voice}")
        return audio
