"""Tests for the Telegram Bot API client."""

import json

import httpx
import pytest

from blogcast.errors import TelegramError
from blogcast.infrastructure.telegram import TelegramClient


def make_client(handler):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TelegramClient("123:abc", base_url="https://telegram.test", client=http)


@pytest.mark.asyncio
async def test_get_updates_parses_messages():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "ok": True,
                "result": [
                    {
                        "update_id": 10,
                        "message": {
                            "message_id": 1,
                            "chat": {"id": 99, "type": "private"},
                            "text": "https://example.com/post",
                        },
                    },
                    {
                        "update_id": 11,
                        "message": {"message_id": 2, "chat": {"id": 99, "type": "private"}},
                    },
                    {"update_id": 12, "edited_message": {}},
                ],
            },
        )

    client = make_client(handler)
    messages = await client.get_updates(offset=10, timeout=5)

    assert seen["url"] == "https://telegram.test/bot123:abc/getUpdates"
    assert seen["body"]["offset"] == 10
    assert seen["body"]["timeout"] == 5
    assert [m.update_id for m in messages] == [10, 11, 12]
    assert messages[0].chat_id == 99
    assert messages[0].text == "https://example.com/post"
    assert messages[1].text is None
    assert messages[2].chat_id is None
    await client.aclose()


@pytest.mark.asyncio
async def test_send_audio_uploads_named_file():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = request.content
        return httpx.Response(200, json={"ok": True, "result": {"message_id": 5}})

    client = make_client(handler)
    await client.send_audio(99, b"ID3fakeaudio", "part_0.mp3")

    assert seen["url"].endswith("/sendAudio")
    assert seen["content_type"].startswith("multipart/form-data")
    assert b'filename="part_0.mp3"' in seen["body"]
    assert b"Content-Type: audio/mpeg" in seen["body"]
    assert b"ID3fakeaudio" in seen["body"]
    await client.aclose()


@pytest.mark.asyncio
async def test_api_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"ok": False, "description": "Bad Request: chat not found"})

    client = make_client(handler)
    with pytest.raises(TelegramError) as exc_info:
        await client.send_message(1, "hi")

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Bad Request: chat not found"
    await client.aclose()


@pytest.mark.asyncio
async def test_transport_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)
    with pytest.raises(TelegramError):
        await client.send_message(1, "hi")
    await client.aclose()
