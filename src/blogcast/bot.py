"""Telegram long-polling loop that hands each text message to the pipeline."""

from __future__ import annotations

import asyncio
import logging

from blogcast.errors import TelegramError
from blogcast.infrastructure.telegram import TelegramClient
from blogcast.models import IncomingMessage, PipelineRequest
from blogcast.services.pipeline import PipelineOrchestrator

logger = logging.getLogger(__name__)


class TelegramPoller:
    """Receives updates and runs one pipeline task per request."""

    def __init__(
        self,
        client: TelegramClient,
        orchestrator: PipelineOrchestrator,
        poll_timeout: int = 30,
        retry_delay: float = 5.0,
    ) -> None:
        self.client = client
        self.orchestrator = orchestrator
        self.poll_timeout = poll_timeout
        self.retry_delay = retry_delay
        self._offset: int | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def poll_once(self) -> list[asyncio.Task]:
        """Fetch one batch of updates and start a task for every request in it."""
        messages = await self.client.get_updates(offset=self._offset, timeout=self.poll_timeout)
        started = []
        for message in messages:
            self._offset = message.update_id + 1
            task = self.dispatch(message)
            if task is not None:
                started.append(task)
        return started

    def dispatch(self, message: IncomingMessage) -> asyncio.Task | None:
        request = PipelineRequest.from_message(message)
        if request is None:
            logger.debug(f"Ignoring update {message.update_id} without text")
            return None

        task = asyncio.create_task(self._handle(request), name=f"pipeline-{message.update_id}")
        # The event loop only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _handle(self, request: PipelineRequest) -> None:
        try:
            await self.orchestrator.handle(request)
        except Exception:
            logger.exception(f"Unexpected failure while handling {request.url}")

    async def run(self) -> None:
        """Poll until cancelled. Transport errors are logged and retried after a delay."""
        logger.info("Starting bot...")
        try:
            while True:
                try:
                    await self.poll_once()
                except TelegramError as e:
                    logger.error(f"Polling failed: {e}")
                    await asyncio.sleep(self.retry_delay)
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        if not self._tasks:
            return
        logger.info(f"Cancelling {len(self._tasks)} in-flight request(s)")
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
