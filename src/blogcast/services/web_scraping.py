"""Article text extraction through the shared Playwright browser session."""

import logging
import time

from blogcast.errors import ExtractionError
from blogcast.infrastructure.browser import BrowserSession

logger = logging.getLogger(__name__)


class WebScrapingService:
    """Reads the paragraphs of a page's main ``article`` element."""

    def __init__(
        self,
        session: BrowserSession,
        article_selector: str = "article",
        paragraph_selector: str = "p",
        timeout: float = 60.0,
    ) -> None:
        self.session = session
        self.article_selector = article_selector
        self.paragraph_selector = paragraph_selector
        self.timeout = timeout

    async def extract_content(self, url: str) -> str:
        """
        Extract the text of every paragraph under the page's article container.

        Args:
            url: The URL to read

        Returns:
            Paragraph texts, each followed by a newline

        Raises:
            ExtractionError: If navigation fails, there is no article, or a paragraph can't be read
        """
        start_time = time.time()
        logger.info(f"Starting extraction for {url}")

        async with self.session.acquire() as page:
            try:
                await page.goto(url, wait_until="domcontentloaded", timeout=self.timeout * 1000)
            except Exception as e:
                raise ExtractionError(f"Navigation to {url} failed: {e}") from e

            article = await page.query_selector(self.article_selector)
            if article is None:
                raise ExtractionError(f"No <{self.article_selector}> element found on {url}")

            paragraphs = await article.query_selector_all(self.paragraph_selector)
            parts = []
            for i, paragraph in enumerate(paragraphs):
                try:
                    parts.append(await paragraph.inner_text())
                except Exception as e:
                    raise ExtractionError(f"Failed to read paragraph {i}: {e}") from e

        content = "".join(f"{part}\n" for part in parts)
        logger.info(
            f"Extraction completed in {time.time() - start_time:.2f}s: {url}",
            extra={"url": url, "paragraphs": len(parts), "char_count": len(content)},
        )
        return content
