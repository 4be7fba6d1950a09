"""
Login handling for the forum's moderator account.

The Authenticator restores the stored session cookies into a browsing
context, checks whether the forum already recognises us, and only falls back
to the login form when it does not. After a fresh login the new cookies are
written back to the SessionStore so the next pool can skip the form.
"""

import logging

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import DEFAULT_NAVIGATION_TIMEOUT_MS
from .errors import LoginTimeout, RootNavigationTimeout
from .models import Credentials
from .pool import BrowsingContext
from .session_store import SessionStore

logger = logging.getLogger(__name__)

# The ACP link in the footer is only rendered for logged-in moderators
LOGGED_IN_SELECTOR = 'div.copyright-body a[href^="/admin/?"]'

USERNAME_SELECTOR = 'input[name="username"]'
PASSWORD_SELECTOR = 'input[name="password"]'
SUBMIT_SELECTOR = 'input[name="login"]'

# Per-keystroke delay when typing credentials (milliseconds)
TYPING_DELAY_MS = 50


class Authenticator:
    """
    Ensures a browsing context is logged into the forum.

    Usage:
        auth = Authenticator("https://forum.example.org", SessionStore("cookies.json"))
        await pool.run_once(lambda ctx: auth.ensure_logged_in(ctx, credentials))
    """

    def __init__(
        self,
        forum_url: str,
        store: SessionStore,
        timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
    ):
        self.forum_url = forum_url.rstrip("/")
        self.store = store
        self.timeout_ms = timeout_ms

    async def ensure_logged_in(self, ctx: BrowsingContext, credentials: Credentials) -> bool:
        """
        Make sure ``ctx`` holds an authenticated session.

        Returns:
            True if the login form was submitted, False if the stored
            session was still valid

        Raises:
            RootNavigationTimeout: if the forum root did not load in time
            LoginTimeout: if any step of the login form timed out
        """
        cookies = await self.store.load()
        if cookies:
            await ctx.context.add_cookies(cookies)

        page = ctx.page
        try:
            await page.goto(
                f"{self.forum_url}/", wait_until="domcontentloaded", timeout=self.timeout_ms
            )
        except PlaywrightTimeoutError as e:
            raise RootNavigationTimeout(f"Timed out loading {self.forum_url}/: {e}") from e

        if await page.query_selector(LOGGED_IN_SELECTOR) is not None:
            logger.info("User is already logged in.")
            return False

        logger.info("User is not logged in. Logging in...")
        try:
            await self._submit_login_form(page, credentials)
        except PlaywrightTimeoutError as e:
            raise LoginTimeout(f"Timed out logging in as {credentials.username}: {e}") from e

        await self.store.save(await ctx.context.cookies())
        logger.info("Logged in as %s", credentials.username)
        return True

    async def _submit_login_form(self, page, credentials: Credentials) -> None:
        await page.goto(
            f"{self.forum_url}/login", wait_until="domcontentloaded", timeout=self.timeout_ms
        )
        await page.wait_for_selector(SUBMIT_SELECTOR, timeout=self.timeout_ms)
        await page.type(USERNAME_SELECTOR, credentials.username, delay=TYPING_DELAY_MS)
        await page.type(PASSWORD_SELECTOR, credentials.password, delay=TYPING_DELAY_MS)
        async with page.expect_navigation(wait_until="domcontentloaded", timeout=self.timeout_ms):
            await page.click(SUBMIT_SELECTOR)
