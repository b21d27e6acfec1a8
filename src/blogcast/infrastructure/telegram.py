"""Async client for the Telegram Bot HTTP API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from blogcast.errors import TelegramError
from blogcast.models import IncomingMessage

logger = logging.getLogger(__name__)


class TelegramClient:
    """Minimal Bot API client: long polling, text messages and audio uploads."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.telegram.org",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = f"{base_url.rstrip('/')}/bot{token}"
        # Long polls hold the connection open, so no read timeout at the client level
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(10.0, read=None))

    async def _call(self, method: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.post(f"{self.base_url}/{method}", **kwargs)
        except httpx.HTTPError as e:
            raise TelegramError(method, f"{type(e).__name__}: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400 or not isinstance(payload, dict) or not payload.get("ok"):
            detail = payload.get("description") if isinstance(payload, dict) else None
            raise TelegramError(method, detail or response.text, status_code=response.status_code)
        return payload.get("result")

    async def get_updates(self, offset: int | None = None, timeout: int = 30) -> list[IncomingMessage]:
        """Long-poll for new messages. Non-message updates are skipped."""
        params: dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            params["offset"] = offset
        updates = await self._call("getUpdates", json=params)

        messages = []
        for update in updates or []:
            message = update.get("message")
            if message is None:
                # Still has to be acknowledged through the offset
                messages.append(IncomingMessage(update_id=update["update_id"]))
                continue
            messages.append(
                IncomingMessage(
                    update_id=update["update_id"],
                    chat_id=message["chat"]["id"],
                    message_id=message.get("message_id"),
                    text=message.get("text"),
                )
            )
        return messages

    async def send_message(self, chat_id: int, text: str) -> None:
        await self._call("sendMessage", json={"chat_id": chat_id, "text": text})

    async def send_audio(
        self, chat_id: int, audio: bytes, filename: str, mime_type: str = "audio/mpeg"
    ) -> None:
        await self._call(
            "sendAudio",
            data={"chat_id": str(chat_id)},
            files={"audio": (filename, audio, mime_type)},
        )

    async def aclose(self) -> None:
        await self._client.aclose()
