"""
Scrape coordinator for the moderated forum.

ForumMonitor ties the pieces together for one scrape cycle:

1. **Launch**: open a WorkerPool of browser contexts
2. **Authenticate**: log in once, on one context, before anything else runs
3. **List**: read the board page and collect topic links
4. **Fetch**: read every topic's post body, up to pool-size at a time
5. **Close**: tear the pool down on every exit path

Only one cycle runs at a time: the trigger endpoint and the background
session refresh share a lock, so two pools never race on the cookie file.

Usage:
    monitor = ForumMonitor(load_settings())
    results = await monitor.run_check()
"""

import asyncio
import logging
from functools import partial
from typing import Callable, List, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .auth import Authenticator
from .browser import PlaywrightContextFactory
from .config import Settings
from .errors import NavigationTimeout
from .fetcher import fetch_post
from .models import FetchResult, TopicReference
from .pool import BrowsingContext, ContextFactory, Task, TaskErrorHook, WorkerPool
from .session_store import SessionStore
from .utils import extract_topic_links

logger = logging.getLogger(__name__)


class ForumMonitor:
    """
    Runs scrape and session-refresh cycles against one forum.

    Args:
        settings: Forum location, credentials and tuning
        store: Cookie persistence (defaults to ``settings.cookies_path``)
        factory_builder: Returns a fresh ContextFactory for each pool
                         (defaults to headless Chromium via Playwright)
        on_task_error: Hook for failed pool tasks (defaults to an error log)
    """

    def __init__(
        self,
        settings: Settings,
        store: Optional[SessionStore] = None,
        factory_builder: Optional[Callable[[], ContextFactory]] = None,
        on_task_error: Optional[TaskErrorHook] = None,
    ):
        self.settings = settings
        self.store = store or SessionStore(settings.cookies_path)
        self.authenticator = Authenticator(
            settings.forum_url, self.store, settings.navigation_timeout_ms
        )
        self._factory_builder = factory_builder or self._playwright_factory
        self._on_task_error = on_task_error
        self._cycle_lock = asyncio.Lock()

    def _playwright_factory(self) -> ContextFactory:
        return PlaywrightContextFactory(
            headless=self.settings.headless,
            timeout_ms=self.settings.navigation_timeout_ms,
        )

    async def open_pool(self) -> WorkerPool:
        """
        Launch a pool and log it in.

        The pool is closed again if authentication fails, and the error
        (NavigationTimeout, LoginTimeout, ...) propagates to the caller.
        """
        pool = await WorkerPool.launch(
            self.settings.pool_size, self._factory_builder(), self._on_task_error
        )
        try:
            await pool.run_once(Task(self._authenticate, "login"))
        except BaseException:
            await pool.close()
            raise
        return pool

    async def _authenticate(self, ctx: BrowsingContext) -> bool:
        return await self.authenticator.ensure_logged_in(ctx, self.settings.credentials)

    async def list_topics(self, pool: WorkerPool, board_url: str) -> List[TopicReference]:
        """Load the board page on one pool context and return its topic links."""

        async def list_board(ctx: BrowsingContext) -> List[TopicReference]:
            try:
                await ctx.page.goto(
                    board_url,
                    wait_until="domcontentloaded",
                    timeout=self.settings.navigation_timeout_ms,
                )
            except PlaywrightTimeoutError as e:
                raise NavigationTimeout(f"Timed out loading board {board_url}: {e}") from e
            html = await ctx.page.content()
            return extract_topic_links(html, ctx.page.url, self.settings.forum_url)

        return await pool.run_once(Task(list_board, f"board {board_url}"))

    async def check_for_new_posts(
        self, pool: WorkerPool, board_url: Optional[str] = None
    ) -> List[FetchResult]:
        """
        Fetch the post body of every topic listed on the board.

        Results come back in board order. A topic that could not be read has
        ``content=None``; if the board itself cannot be read the result is an
        empty list.
        """
        board_url = board_url or self.settings.board_url
        try:
            refs = await self.list_topics(pool, board_url)
            logger.info("Found %d topics on %s", len(refs), board_url)

            tasks = [
                Task(
                    partial(fetch_post, ref=ref, timeout_ms=self.settings.navigation_timeout_ms),
                    label=ref.url,
                )
                for ref in refs
            ]
            outcomes = await pool.submit_all(tasks)
        except Exception as e:
            logger.error("Error while checking for new posts: %s", e)
            return []

        results = [
            FetchResult(ref, outcome.value if outcome.ok else None)
            for ref, outcome in zip(refs, outcomes)
        ]
        failed = sum(1 for r in results if not r.ok)
        logger.info("Check complete: %d fetched, %d failed", len(results) - failed, failed)
        return results

    async def run_check(self, board_url: Optional[str] = None) -> List[FetchResult]:
        """
        Full scrape cycle: launch, authenticate, check the board, close.

        Raises:
            PoolLaunchError: if the browser could not start
            AuthenticationError / NavigationTimeout: if login failed
        """
        async with self._cycle_lock:
            pool = await self.open_pool()
            async with pool:
                return await self.check_for_new_posts(pool, board_url)

    async def refresh_session(self) -> None:
        """Log in (or confirm the stored session) and close the pool again."""
        async with self._cycle_lock:
            pool = await self.open_pool()
            async with pool:
                logger.info("Session refreshed")
