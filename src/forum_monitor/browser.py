"""Playwright implementation of the pool's context factory."""

import logging
from typing import List, Optional

from playwright.async_api import Browser, Playwright, async_playwright

from .config import DEFAULT_NAVIGATION_TIMEOUT_MS
from .pool import BrowsingContext

logger = logging.getLogger(__name__)

CHROMIUM_ARGS = ["--no-sandbox"]


class PlaywrightContextFactory:
    """
    Launches one headless Chromium and opens an isolated context per slot.

    Each context gets its own cookie jar and a single page whose default
    timeout matches the navigation deadline.
    """

    def __init__(
        self,
        headless: bool = True,
        timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
        args: Optional[List[str]] = None,
    ):
        self.headless = headless
        self.timeout_ms = timeout_ms
        self.args = list(CHROMIUM_ARGS if args is None else args)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def start(self) -> None:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=self.args,
                timeout=self.timeout_ms,
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.debug("Chromium %s started", self._browser.version)

    async def new_context(self, slot_id: int) -> BrowsingContext:
        if self._browser is None:
            raise RuntimeError("start() must be called before new_context()")
        context = await self._browser.new_context(no_viewport=True)
        context.set_default_timeout(self.timeout_ms)
        context.set_default_navigation_timeout(self.timeout_ms)
        page = await context.new_page()
        return BrowsingContext(slot_id, context, page)

    async def stop(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
