"""Tests for the Telegram polling loop."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from blogcast.bot import TelegramPoller
from blogcast.errors import TelegramError
from blogcast.models import IncomingMessage


@pytest.fixture
def poller():
    client = MagicMock()
    client.get_updates = AsyncMock()
    orchestrator = MagicMock()
    orchestrator.handle = AsyncMock()
    return TelegramPoller(client, orchestrator, poll_timeout=1, retry_delay=0)


@pytest.mark.asyncio
async def test_text_messages_become_requests(poller):
    poller.client.get_updates.return_value = [
        IncomingMessage(update_id=7, chat_id=1, message_id=3, text=" https://a.example/post "),
        IncomingMessage(update_id=8, chat_id=2, message_id=4, text=None),
        IncomingMessage(update_id=9),
    ]

    tasks = await poller.poll_once()
    await asyncio.gather(*tasks)

    assert len(tasks) == 1
    request = poller.orchestrator.handle.await_args.args[0]
    assert request.chat_id == 1
    assert request.url == "https://a.example/post"
    assert poller.in_flight == 0

    # Offset moves past every update, including ignored ones
    poller.client.get_updates.return_value = []
    await poller.poll_once()
    assert poller.client.get_updates.await_args.kwargs["offset"] == 10


@pytest.mark.asyncio
async def test_requests_run_concurrently(poller):
    release = asyncio.Event()
    started = []

    async def handle(request):
        started.append(request.chat_id)
        await release.wait()

    poller.orchestrator.handle.side_effect = handle
    poller.client.get_updates.return_value = [
        IncomingMessage(update_id=1, chat_id=1, text="https://a.example"),
        IncomingMessage(update_id=2, chat_id=2, text="https://b.example"),
    ]

    tasks = await poller.poll_once()
    await asyncio.sleep(0.01)
    assert sorted(started) == [1, 2]
    assert poller.in_flight == 2

    release.set()
    await asyncio.gather(*tasks)


@pytest.mark.asyncio
async def test_unexpected_handler_error_is_contained(poller):
    poller.orchestrator.handle.side_effect = RuntimeError("bug")
    poller.client.get_updates.return_value = [
        IncomingMessage(update_id=1, chat_id=1, text="https://a.example"),
    ]

    tasks = await poller.poll_once()
    await asyncio.gather(*tasks)

    assert tasks[0].exception() is None


@pytest.mark.asyncio
async def test_run_retries_after_polling_error(poller):
    poller.client.get_updates.side_effect = [
        TelegramError("getUpdates", "Bad Gateway", 502),
        [],
        asyncio.CancelledError(),
    ]

    with pytest.raises(asyncio.CancelledError):
        await poller.run()

    assert poller.client.get_updates.await_count == 3


@pytest.mark.asyncio
async def test_whitespace_only_message_is_ignored(poller):
    poller.client.get_updates.return_value = [
        IncomingMessage(update_id=3, chat_id=1, text="   \n "),
    ]

    tasks = await poller.poll_once()

    assert tasks == []
    poller.orchestrator.handle.assert_not_awaited()
