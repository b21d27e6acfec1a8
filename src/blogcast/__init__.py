"""
Blogcast – reads blog posts aloud in a Telegram chat.

This top-level package exposes the core models of the pipeline.
"""

from .models import (
    AudioArtifact,
    IncomingMessage,
    PipelineRequest,
    PipelineStage,
    TextChunk,
)

__all__ = [
    "AudioArtifact",
    "IncomingMessage",
    "PipelineRequest",
    "PipelineStage",
    "TextChunk",
]
