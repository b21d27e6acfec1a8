"""Rewrites scraped blog text into something pleasant to listen to."""

from __future__ import annotations

import logging

from openai import APIError, APIStatusError, AsyncOpenAI

from blogcast.errors import RewriteError

logger = logging.getLogger(__name__)

EDIT_INSTRUCTIONS = (
    "Given text from a blog post:\n"
    "- Remove any introductory statement or metadata\n"
    "- Redact code blocks and replace them with a short technical explanation of their content. "
    'Start with "EDIT:". End with "END OF EDIT.".\n'
    "Emojis or other characters that cannot be pronounced should be removed.\n"
    "Your response will be directly read of the user - so avoid any additional content "
    "besides the edited post\n\nOK?"
)

EDIT_ACKNOWLEDGEMENT = (
    "Okay, just provide the text from the blog post and I'll make the necessary edits."
)


def build_messages(text: str) -> list[dict]:
    """Instruction turn, canned assistant reply, then the raw text as the last user turn."""
    return [
        {"role": "user", "content": [{"type": "text", "text": EDIT_INSTRUCTIONS}]},
        {"role": "assistant", "content": [{"type": "text", "text": EDIT_ACKNOWLEDGEMENT}]},
        {"role": "user", "content": [{"type": "text", "text": text}]},
    ]


class TextEditorService:
    """Calls the chat completion API to edit text for narration."""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o") -> None:
        self.client = client
        self.model = model

    async def edit_text(self, text: str) -> str:
        """
        Rewrite ``text`` for narration.

        Raises:
            RewriteError: On a non-2xx response, transport failure or a reply without content
        """
        logger.info(f"Editing text of length {len(text)} with {self.model}")
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=build_messages(text),
                temperature=1,
                top_p=1,
                frequency_penalty=0,
                presence_penalty=0,
            )
        except APIStatusError as e:
            raise RewriteError(f"Failed to edit text: {e.status_code}: {e.response.text}") from e
        except APIError as e:
            raise RewriteError(f"Failed to edit text: {e}") from e

        if not response.choices or response.choices[0].message.content is None:
            raise RewriteError("Failed to edit text: response has no choices[0].message.content")

        content = response.choices[0].message.content
        logger.info(f"Edited text length: {len(content)}")
        return content
