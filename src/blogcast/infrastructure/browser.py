"""Local Chromium driver process and the shared Playwright browser session.

The driver is a headless Chromium exposing the DevTools protocol on a fixed
port. Playwright connects to it over CDP; the resulting page is shared by all
requests and guarded by a lock so only one navigation runs at a time.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shutil
import tempfile
from collections.abc import AsyncIterator

from playwright.async_api import Browser, Page, Playwright

from blogcast.errors import StartupError

logger = logging.getLogger(__name__)

READY_MARKER = "DevTools listening on"

DEFAULT_ARGS = [
    "--headless=new",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--no-first-run",
    "--disable-session-restore",
]


class BrowserDriver:
    """Owns the Chromium process that Playwright drives over CDP."""

    def __init__(self, executable: str, port: int = 9222, start_timeout: float = 30.0) -> None:
        self.executable = executable
        self.port = port
        self.start_timeout = start_timeout
        self.endpoint: str | None = None
        self._process: asyncio.subprocess.Process | None = None
        self._drain_task: asyncio.Task | None = None
        self._profile_dir: str | None = None

    @property
    def command(self) -> list[str]:
        return [
            self.executable,
            *DEFAULT_ARGS,
            f"--remote-debugging-port={self.port}",
            f"--user-data-dir={self._profile_dir}",
            "about:blank",
        ]

    async def kill_existing(self) -> None:
        """Kill drivers left over from a previous run that still hold our debug port."""
        logger.info(f"Killing existing browser drivers on port {self.port} if any are running")
        try:
            proc = await asyncio.create_subprocess_exec(
                "pkill",
                "-f",
                "--",
                f"--remote-debugging-port={self.port}",
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            await proc.wait()
        except FileNotFoundError:
            logger.warning("pkill not available, skipping cleanup of stale drivers")

    async def start(self) -> str:
        """
        Start the driver and wait until it reports it is listening.

        Returns:
            The DevTools websocket endpoint

        Raises:
            StartupError: If the executable is missing or never becomes ready
        """
        self._profile_dir = tempfile.mkdtemp(prefix="blogcast-profile-")
        logger.info(f"Running browser driver ({self.executable})")
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self.command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise StartupError(f"Failed to start browser driver {self.executable!r}: {e}") from e

        logger.info("Waiting for browser driver to start...")
        try:
            self.endpoint = await asyncio.wait_for(self._wait_ready(), timeout=self.start_timeout)
        except asyncio.TimeoutError as e:
            await self.stop()
            raise StartupError(
                f"Browser driver did not report readiness within {self.start_timeout}s"
            ) from e
        except StartupError:
            await self.stop()
            raise

        # Chromium keeps logging to stderr; a full pipe would block it
        self._drain_task = asyncio.create_task(self._drain())
        logger.info(f"Browser driver started: {self.endpoint}")
        return self.endpoint

    async def _wait_ready(self) -> str:
        assert self._process is not None and self._process.stderr is not None
        while True:
            raw = await self._process.stderr.readline()
            if not raw:
                code = await self._process.wait()
                raise StartupError(f"Browser driver exited with code {code} before it was ready")
            line = raw.decode("utf-8", errors="replace").strip()
            logger.debug(f"Driver: {line}")
            if READY_MARKER in line:
                return line.split(READY_MARKER, 1)[1].strip(" :")

    async def _drain(self) -> None:
        assert self._process is not None and self._process.stderr is not None
        async for raw in self._process.stderr:
            logger.debug(f"Driver: {raw.decode('utf-8', errors='replace').rstrip()}")

    async def stop(self) -> None:
        if self._drain_task is not None:
            self._drain_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._drain_task
            self._drain_task = None

        if self._process is not None and self._process.returncode is None:
            self._process.terminate()
            try:
                await asyncio.wait_for(self._process.wait(), timeout=5)
            except asyncio.TimeoutError:
                logger.warning("Browser driver did not terminate, killing it")
                self._process.kill()
                await self._process.wait()
        self._process = None

        if self._profile_dir is not None:
            shutil.rmtree(self._profile_dir, ignore_errors=True)
            self._profile_dir = None


class BrowserSession:
    """A single page shared by all requests, used through ``acquire()``."""

    def __init__(self, browser: Browser, page: Page) -> None:
        self.browser = browser
        self.page = page
        self._lock = asyncio.Lock()

    @classmethod
    async def connect(cls, playwright: Playwright, endpoint: str, timeout_ms: int = 10000) -> BrowserSession:
        """Attach to a running driver and open the page used for extraction."""
        try:
            browser = await playwright.chromium.connect_over_cdp(endpoint, timeout=timeout_ms)
            context = browser.contexts[0] if browser.contexts else await browser.new_context()
            page = await context.new_page()
        except Exception as e:
            raise StartupError(f"Failed to initialize browser session: {e}") from e
        return cls(browser, page)

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @contextlib.asynccontextmanager
    async def acquire(self) -> AsyncIterator[Page]:
        """Hold the page exclusively for the duration of the block."""
        async with self._lock:
            yield self.page

    async def close(self) -> None:
        try:
            await self.page.close()
        except Exception as e:
            logger.warning(f"Failed to close page: {e}")
        await self.browser.close()
