"""Turns one URL into a sequence of audio messages.

Stages run strictly in order for a request:
extract -> rewrite -> chunk -> (synthesize -> deliver) for every chunk.
The first failing stage is reported to the requester and ends the request.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TypeVar

from blogcast.errors import (
    DeliveryError,
    ExtractionError,
    RewriteError,
    StageError,
    SynthesisError,
    TelegramError,
)
from blogcast.infrastructure.telegram import TelegramClient
from blogcast.infrastructure.tts import TTSProvider
from blogcast.models import AudioArtifact, PipelineRequest, PipelineStage
from blogcast.services.chunking import DEFAULT_MAX_CHUNK_SIZE, chunk_texts
from blogcast.services.text_editor import TextEditorService
from blogcast.services.web_scraping import WebScrapingService

logger = logging.getLogger(__name__)

T = TypeVar("T")

ACKNOWLEDGEMENT = "Got it! Working on it. It may take a while..."
NOTHING_TO_READ = "There was no text left to read after editing."


@dataclass
class PipelineResult:
    """Outcome of one request: the last stage reached and what was delivered."""

    request: PipelineRequest
    stage: PipelineStage = PipelineStage.RECEIVED
    delivered: list[int] = field(default_factory=list)
    error: StageError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PipelineOrchestrator:
    """Runs the blog-to-audio stages for each incoming request."""

    def __init__(
        self,
        scraper: WebScrapingService,
        editor: TextEditorService,
        tts: TTSProvider,
        messenger: TelegramClient,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        extraction_timeout: float | None = None,
        rewrite_timeout: float | None = None,
        synthesis_timeout: float | None = None,
        delivery_timeout: float | None = None,
    ) -> None:
        self.scraper = scraper
        self.editor = editor
        self.tts = tts
        self.messenger = messenger
        self.max_chunk_size = max_chunk_size
        self.extraction_timeout = extraction_timeout
        self.rewrite_timeout = rewrite_timeout
        self.synthesis_timeout = synthesis_timeout
        self.delivery_timeout = delivery_timeout

    async def handle(self, request: PipelineRequest) -> PipelineResult:
        """
        Process one request end to end.

        Never raises for a per-request failure: the error is sent to the requester
        and returned on the result instead.
        """
        result = PipelineResult(request=request)
        start_time = time.time()
        logger.info(f"Received URL from chat {request.chat_id}: {request.url}")

        # Runs alongside extraction; awaited before anything else is sent so it arrives first
        ack = asyncio.create_task(self._acknowledge(request))

        try:
            await self._process(request, result, ack)
        except StageError as e:
            result.stage = PipelineStage.FAILED
            result.error = e
            logger.warning(f"Request {request.url} failed at {e.stage.value}: {e}")
            await ack
            await self._report(request, e)
            return result
        finally:
            if not ack.done():
                ack.cancel()

        result.stage = PipelineStage.DONE
        logger.info(
            f"Request {request.url} completed in {time.time() - start_time:.2f}s, "
            f"{len(result.delivered)} part(s) delivered"
        )
        return result

    async def _process(
        self, request: PipelineRequest, result: PipelineResult, ack: asyncio.Task
    ) -> None:
        result.stage = PipelineStage.EXTRACTING
        blog_text = await self._run_stage(
            ExtractionError, self.scraper.extract_content(request.url), self.extraction_timeout
        )
        logger.info(f"Retrieved blog text of length {len(blog_text)}")

        result.stage = PipelineStage.REWRITING
        edited_text = await self._run_stage(
            RewriteError, self.editor.edit_text(blog_text), self.rewrite_timeout
        )

        result.stage = PipelineStage.CHUNKING
        chunks = chunk_texts(edited_text, self.max_chunk_size)
        logger.info(f"Split edited text into {len(chunks)} part(s)")
        await ack
        if not chunks:
            await self._notify(request, NOTHING_TO_READ)
            return

        # One chunk at a time: keeps parts in order and stays under TTS rate limits
        for chunk in chunks:
            result.stage = PipelineStage.SYNTHESIZING
            logger.info(f"Converting part {chunk.index} to speech...")
            audio = await self._run_stage(
                SynthesisError,
                self.tts.synth(text=chunk.text),
                self.synthesis_timeout,
                index=chunk.index,
            )
            artifact = AudioArtifact(index=chunk.index, content=audio)

            result.stage = PipelineStage.DELIVERING
            logger.info(f"Sending audio of part {chunk.index}...")
            await self._run_stage(
                DeliveryError,
                self.messenger.send_audio(
                    request.chat_id, artifact.content, artifact.filename, artifact.mime_type
                ),
                self.delivery_timeout,
                index=chunk.index,
            )
            result.delivered.append(chunk.index)

    async def _run_stage(
        self,
        error_cls: type[StageError],
        call: Awaitable[T],
        timeout: float | None,
        index: int | None = None,
    ) -> T:
        """Await ``call`` and turn any failure or timeout into ``error_cls``."""
        try:
            return await asyncio.wait_for(call, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise error_cls(f"Timed out after {timeout}s", index=index) from e
        except error_cls as e:
            if e.index is None:
                e.index = index
            raise
        except Exception as e:
            logger.debug(f"{error_cls.__name__} caused by", exc_info=True)
            raise error_cls.from_exception(e, index=index) from e

    async def _acknowledge(self, request: PipelineRequest) -> None:
        if not await self._notify(request, ACKNOWLEDGEMENT):
            logger.warning(f"Could not acknowledge chat {request.chat_id}, continuing anyway")

    async def _report(self, request: PipelineRequest, error: StageError) -> None:
        if not await self._notify(request, error.user_message()):
            logger.error(f"Could not report failure to chat {request.chat_id}: {error}")

    async def _notify(self, request: PipelineRequest, text: str) -> bool:
        """Send a text message; returns False instead of raising if it can't be sent."""
        try:
            await asyncio.wait_for(
                self.messenger.send_message(request.chat_id, text), timeout=self.delivery_timeout
            )
        except (TelegramError, asyncio.TimeoutError) as e:
            logger.warning(f"Failed to send message to chat {request.chat_id}: {e}")
            return False
        return True
