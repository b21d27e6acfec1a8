"""Error taxonomy for the blog-to-audio pipeline.

Stage errors carry the stage that failed plus a human readable label, so the
orchestrator can report any failure to the requester the same way.
"""

from __future__ import annotations

from blogcast.models import PipelineStage


class BlogcastError(Exception):
    """Base class for all errors raised by blogcast."""


class StartupError(BlogcastError):
    """The process cannot start: missing driver, credentials or browser."""


class TelegramError(BlogcastError):
    """The chat API rejected a request or could not be reached."""

    def __init__(self, method: str, detail: str, status_code: int | None = None) -> None:
        self.method = method
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"Telegram {method} failed ({status_code}): {detail}")


class StageError(BlogcastError):
    """A pipeline stage failed for one request."""

    stage: PipelineStage = PipelineStage.FAILED
    label: str = "Error"

    def __init__(self, detail: str, index: int | None = None) -> None:
        self.detail = detail
        self.index = index
        super().__init__(detail)

    def __str__(self) -> str:
        return f"{self.stage_label}: {self.detail}"

    @property
    def stage_label(self) -> str:
        if self.index is None:
            return self.label
        return f"{self.label} (part {self.index})"

    def user_message(self) -> str:
        """Text sent back to the requester."""
        return f"Error: {self.stage_label} {self.detail}"

    @classmethod
    def from_exception(cls, exc: BaseException, index: int | None = None) -> StageError:
        if isinstance(exc, cls):
            if exc.index is None:
                exc.index = index
            return exc
        return cls(f"{type(exc).__name__}({exc!s})", index=index)


class ExtractionError(StageError):
    stage = PipelineStage.EXTRACTING
    label = "Error retrieving blog text"


class RewriteError(StageError):
    stage = PipelineStage.REWRITING
    label = "Error editing text"


class SynthesisError(StageError):
    stage = PipelineStage.SYNTHESIZING
    label = "Error converting text to speech"


class DeliveryError(StageError):
    stage = PipelineStage.DELIVERING
    label = "Error sending audio"
