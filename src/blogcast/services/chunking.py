"""Line-preserving text chunking for TTS payload limits."""

from __future__ import annotations

from blogcast.models import TextChunk

# OpenAI's speech endpoint rejects inputs longer than this
DEFAULT_MAX_CHUNK_SIZE = 4096


def split_lines(text: str) -> list[str]:
    """Split on newlines. A final newline does not start an empty line; CRLF is accepted."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def chunk_text_by_lines(text: str, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> list[str]:
    """
    Split text into chunks of at most ``max_chunk_size`` characters without breaking lines.

    Lines inside a chunk are joined with a single newline, which counts toward the size.
    A line that is longer than ``max_chunk_size`` on its own is kept whole in its own chunk.

    Args:
        text: Multi-line text
        max_chunk_size: Maximum characters per chunk

    Returns:
        Chunks in original line order
    """
    if max_chunk_size < 1:
        raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")

    chunks: list[str] = []
    current: list[str] = []
    current_len = 0

    for line in split_lines(text):
        if current and current_len + 1 + len(line) > max_chunk_size:
            chunks.append("\n".join(current))
            current = []
            current_len = 0

        # +1 for the newline joining this line to the previous one
        current_len += len(line) + (1 if current else 0)
        current.append(line)

    if current:
        chunks.append("\n".join(current))

    return chunks


def chunk_texts(text: str, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> list[TextChunk]:
    """
    Chunks ready for synthesis, tagged with contiguous indices.

    Blank chunks (only empty or whitespace lines) are dropped; the speech endpoint
    rejects empty input.
    """
    speakable = [c for c in chunk_text_by_lines(text, max_chunk_size) if c.strip()]
    return [TextChunk(index=i, text=chunk) for i, chunk in enumerate(speakable)]
