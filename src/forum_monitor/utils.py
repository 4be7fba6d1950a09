"""
Helpers for turning board pages into topic references.

The listing page is read once from the browser as HTML and parsed here with
BeautifulSoup, which keeps the link rules testable without a browser.
"""

import logging
from typing import List, Optional
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

from .models import TopicReference

logger = logging.getLogger(__name__)

TOPIC_TITLE_SELECTOR = ".topictitle"


def same_host(url: str, forum_url: str) -> bool:
    """
    Check that ``url`` points at the forum's own host.

    Board pages can carry links to other sites (ads, signatures, redirects);
    only topics hosted on the forum itself are worth opening with the
    moderator session.

    Example:
        same_host("https://forum.example.org/t/1", "https://forum.example.org")  # True
        same_host("https://evil.example.com/t/1", "https://forum.example.org")   # False
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return False
    return parsed.hostname is not None and parsed.hostname == urlparse(forum_url).hostname


def extract_topic_links(
    html: str, page_url: str, forum_url: Optional[str] = None
) -> List[TopicReference]:
    """
    Extract topic references from a board listing page.

    Args:
        html: Board page HTML
        page_url: URL the page was loaded from, used to resolve relative links
        forum_url: Forum root. Links are kept when they point at the host
                   the page was served from or at this one, so a board
                   that redirects to a www. alias still lists its topics

    Returns:
        Topic references in document order, each URL listed once
    """
    soup = BeautifulSoup(html, "lxml")
    hosts = [page_url] + ([forum_url] if forum_url else [])

    refs: List[TopicReference] = []
    seen = set()
    for element in soup.select(TOPIC_TITLE_SELECTOR):
        href = element.get("href")
        if not href:
            # Some styles put the class on a wrapper around the anchor
            anchor = element.find("a", href=True)
            href = anchor.get("href") if anchor else None
        if not href:
            continue

        url, _ = urldefrag(urljoin(page_url, href))
        if not any(same_host(url, host) for host in hosts):
            logger.debug("Skipping off-site topic link %s", url)
            continue
        if url in seen:
            continue
        seen.add(url)
        refs.append(TopicReference(url))

    return refs
