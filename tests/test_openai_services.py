"""Tests for the OpenAI-backed text editor and TTS provider."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from blogcast.errors import RewriteError, SynthesisError
from blogcast.infrastructure.tts import OpenAIProvider
from blogcast.services.text_editor import EDIT_INSTRUCTIONS, TextEditorService


def status_error(status: int, body: str, path: str) -> openai.APIStatusError:
    request = httpx.Request("POST", f"https://api.openai.com/v1/{path}")
    response = httpx.Response(status, text=body, request=request)
    return openai.APIStatusError(f"Error code: {status}", response=response, body=None)


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestTextEditorService:
    """Test TextEditorService.edit_text."""

    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=completion("Edited post."))
        return client

    @pytest.mark.asyncio
    async def test_sends_instructions_then_text(self, client):
        editor = TextEditorService(client, model="gpt-4o")

        assert await editor.edit_text("Raw post.") == "Edited post."

        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        messages = kwargs["messages"]
        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        assert messages[0]["content"][0]["text"] == EDIT_INSTRUCTIONS
        assert messages[-1]["content"][0]["text"] == "Raw post."

    @pytest.mark.asyncio
    async def test_error_status_carries_body(self, client):
        client.chat.completions.create.side_effect = status_error(
            401, '{"error": "invalid key"}', "chat/completions"
        )
        editor = TextEditorService(client)

        with pytest.raises(RewriteError) as exc_info:
            await editor.edit_text("Raw post.")

        assert "401" in exc_info.value.detail
        assert "invalid key" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_missing_content_is_an_error(self, client):
        client.chat.completions.create.return_value = completion(None)
        editor = TextEditorService(client)

        with pytest.raises(RewriteError):
            await editor.edit_text("Raw post.")

    @pytest.mark.asyncio
    async def test_no_choices_is_an_error(self, client):
        client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        editor = TextEditorService(client)

        with pytest.raises(RewriteError):
            await editor.edit_text("Raw post.")


class TestOpenAIProvider:
    """Test OpenAIProvider.synth."""

    @pytest.mark.asyncio
    async def test_returns_audio_bytes(self):
        client = MagicMock()
        client.audio.speech.create = AsyncMock(return_value=SimpleNamespace(content=b"ID3audio"))
        provider = OpenAIProvider(client)

        audio = await provider.synth(text="Hello there.")

        assert audio == b"ID3audio"
        client.audio.speech.create.assert_awaited_once_with(
            model="tts-1", voice="nova", input="Hello there.", response_format="mp3"
        )

    @pytest.mark.asyncio
    async def test_error_status_raises_synthesis_error(self):
        client = MagicMock()
        client.audio.speech.create = AsyncMock(
            side_effect=status_error(400, "input too long", "audio/speech")
        )
        provider = OpenAIProvider(client)

        with pytest.raises(SynthesisError) as exc_info:
            await provider.synth(text="x" * 5000)

        assert "input too long" in exc_info.value.detail
        assert exc_info.value.index is None

    @pytest.mark.asyncio
    async def test_uses_configured_voice(self):
        client = MagicMock()
        client.audio.speech.create = AsyncMock(return_value=SimpleNamespace(content=b"ID3audio"))
        provider = OpenAIProvider(client, model="tts-1-hd", voice="onyx")

        await provider.synth(text="Hello there.")

        kwargs = client.audio.speech.create.await_args.kwargs
        assert kwargs["model"] == "tts-1-hd"
        assert kwargs["voice"] == "onyx"
