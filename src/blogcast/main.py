"""Process entry point: start the browser driver, then serve the bot."""

from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import load_dotenv
from openai import AsyncOpenAI
from playwright.async_api import async_playwright

from blogcast.bot import TelegramPoller
from blogcast.config import Settings, load_settings
from blogcast.errors import StartupError
from blogcast.infrastructure.browser import BrowserDriver, BrowserSession
from blogcast.infrastructure.telegram import TelegramClient
from blogcast.infrastructure.tts import OpenAIProvider
from blogcast.services.pipeline import PipelineOrchestrator
from blogcast.services.text_editor import TextEditorService
from blogcast.services.web_scraping import WebScrapingService

logger = logging.getLogger(__name__)


def build_orchestrator(
    settings: Settings, session: BrowserSession, telegram: TelegramClient, openai_client: AsyncOpenAI
) -> PipelineOrchestrator:
    return PipelineOrchestrator(
        scraper=WebScrapingService(session, timeout=settings.extraction_timeout),
        editor=TextEditorService(openai_client, model=settings.rewrite_model),
        tts=OpenAIProvider(openai_client, model=settings.tts_model, voice=settings.tts_voice),
        messenger=telegram,
        max_chunk_size=settings.max_chunk_size,
        extraction_timeout=settings.extraction_timeout,
        rewrite_timeout=settings.rewrite_timeout,
        synthesis_timeout=settings.synthesis_timeout,
        delivery_timeout=settings.delivery_timeout,
    )


async def serve(settings: Settings) -> None:
    settings.require_credentials()

    async with async_playwright() as playwright:
        driver = BrowserDriver(
            settings.browser_path or playwright.chromium.executable_path,
            port=settings.browser_debug_port,
            start_timeout=settings.browser_start_timeout,
        )
        await driver.kill_existing()
        endpoint = await driver.start()
        try:
            logger.info("Initializing browser session...")
            session = await BrowserSession.connect(playwright, endpoint)
            telegram = TelegramClient(settings.telegram_bot_token, base_url=settings.telegram_api_url)
            openai_client = AsyncOpenAI(api_key=settings.openai_api_key)
            try:
                orchestrator = build_orchestrator(settings, session, telegram, openai_client)
                await TelegramPoller(telegram, orchestrator, poll_timeout=settings.poll_timeout).run()
            finally:
                await telegram.aclose()
                await openai_client.close()
                await session.close()
        finally:
            await driver.stop()


def main() -> None:
    load_dotenv()
    try:
        settings = load_settings()
        asyncio.run(serve(settings))
    except StartupError as e:
        logger.error(f"Startup failed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
