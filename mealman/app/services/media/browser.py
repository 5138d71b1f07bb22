"""Headless browser rendering via Playwright.

Every render owns its own browser process. The process is acquired in an
async context manager and torn down on the way out, including when the render
is cancelled by its timeout.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, TypeVar

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

from mealman.app.core.config import Settings
from mealman.app.core.errors import FetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


class HeadlessBrowser:
    def __init__(self, settings: Settings):
        self.user_agent = settings.scraper_user_agent
        self.timeout_seconds = settings.fetch_timeout_seconds
        self.headless = settings.browser_headless

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Page]:
        """Launch a browser and yield a fresh page; always closes the browser."""
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(headless=self.headless, args=LAUNCH_ARGS)
            try:
                context = await browser.new_context(user_agent=self.user_agent)
                yield await context.new_page()
            finally:
                await browser.close()
        finally:
            await playwright.stop()

    async def _render(self, url: str, evaluate: Callable[[Page], Awaitable[T]]) -> T:
        async with self.session() as page:
            await page.goto(
                url, wait_until="networkidle", timeout=self.timeout_seconds * 1000
            )
            return await evaluate(page)

    async def render(
        self,
        url: str,
        evaluate: Callable[[Page], Awaitable[T]],
        media_type: str = "webpage",
    ) -> T:
        """Load ``url`` and run ``evaluate`` against the rendered page."""
        logger.info("Rendering %s in headless browser", url)
        try:
            return await asyncio.wait_for(self._render(url, evaluate), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise FetchError(
                url, f"page render timed out after {self.timeout_seconds:g}s", media_type
            ) from exc
        except PlaywrightError as exc:
            raise FetchError(url, f"headless render failed: {exc}", media_type) from exc
