from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

# =============================================================================
# Pipeline Models
# =============================================================================


class PipelineStage(str, Enum):
    """Processing states of a single request."""

    RECEIVED = "RECEIVED"
    EXTRACTING = "EXTRACTING"
    REWRITING = "REWRITING"
    CHUNKING = "CHUNKING"
    SYNTHESIZING = "SYNTHESIZING"
    DELIVERING = "DELIVERING"
    DONE = "DONE"
    FAILED = "FAILED"


class IncomingMessage(BaseModel):
    """A chat message received from the bot transport."""

    update_id: int = Field(..., description="Transport update identifier")
    chat_id: int | None = Field(None, description="Chat the message was sent in")
    message_id: int | None = Field(None, description="Message identifier within the chat")
    text: str | None = Field(None, description="Text content, absent for stickers, photos etc.")


class PipelineRequest(BaseModel):
    """A URL sent by a requester, to be turned into audio."""

    chat_id: int = Field(..., description="Requester chat identity")
    url: str = Field(..., description="Page to read")
    message_id: int | None = Field(None, description="Originating message")

    @classmethod
    def from_message(cls, message: IncomingMessage) -> PipelineRequest | None:
        """Build a request from a chat message, or None if it carries no text."""
        url = (message.text or "").strip()
        if message.chat_id is None or not url:
            return None
        return cls(chat_id=message.chat_id, url=url, message_id=message.message_id)


class TextChunk(BaseModel):
    """One ordered segment of the edited text."""

    index: int = Field(..., ge=0, description="Position of the chunk, starting at 0")
    text: str


class AudioArtifact(BaseModel):
    """Synthesized audio for one chunk."""

    index: int = Field(..., ge=0)
    content: bytes
    mime_type: str = "audio/mpeg"

    @property
    def filename(self) -> str:
        return f"part_{self.index}.mp3"
