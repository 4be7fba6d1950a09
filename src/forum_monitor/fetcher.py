"""
Post body extraction.

``fetch_post`` is the per-topic task body: it never raises, a failed topic
simply comes back as None so the other topics of the cycle keep going.
"""

import logging
from typing import Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import DEFAULT_NAVIGATION_TIMEOUT_MS
from .models import TopicReference
from .pool import BrowsingContext

logger = logging.getLogger(__name__)

POST_BODY_SELECTOR = ".postbody"
NO_CONTENT = "no content found"

# Sub-resources a text scrape never needs
BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font", "media"})

RESOURCE_FILTER = "block-nonessential-resources"


def is_nonessential(resource_type: str) -> bool:
    """True for request kinds that are aborted before they hit the network."""
    return resource_type in BLOCKED_RESOURCE_TYPES


async def _route_request(route) -> None:
    if is_nonessential(route.request.resource_type):
        await route.abort()
    else:
        await route.continue_()


async def install_resource_filter(ctx: BrowsingContext) -> None:
    await ctx.context.route("**/*", _route_request)


async def fetch_post(
    ctx: BrowsingContext,
    ref: TopicReference,
    timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
) -> Optional[str]:
    """
    Return the trimmed post body of ``ref``.

    Returns "no content found" when the page has no post body and None when
    navigation or extraction failed.
    """
    try:
        await ctx.configure_once(RESOURCE_FILTER, install_resource_filter)

        logger.info("Navigating to post: %s", ref)
        await ctx.page.goto(ref.url, wait_until="domcontentloaded", timeout=timeout_ms)

        body = await ctx.page.query_selector(POST_BODY_SELECTOR)
        if body is None:
            content = NO_CONTENT
        else:
            content = (await body.inner_text()).strip()

        logger.debug("Content of post %s: %s", ref, content)
        return content

    except PlaywrightTimeoutError as e:
        logger.warning("Timed out reading post %s: %s", ref, e)
        return None
    except Exception as e:
        logger.warning("Error while reading post %s: %s", ref, e)
        return None
