"""
Persistence of the authenticated session's cookies.

The store is a single JSON file holding the cookie records read back from the
browser after a successful login. It is loaded once when a pool authenticates
and overwritten once after a fresh login; only one pool is alive at a time, so
there is never more than one writer.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import aiofiles
import aiofiles.os
import orjson

logger = logging.getLogger(__name__)

Cookie = Dict[str, Any]

# Keys accepted by BrowserContext.add_cookies(); anything else (size, session,
# priority, sourceScheme... as written by other automation tools) is dropped.
COOKIE_KEYS = ("name", "value", "url", "domain", "path", "expires", "httpOnly", "secure", "sameSite")
SAME_SITE_VALUES = {"Strict", "Lax", "None"}


def normalize_cookie(record: Any) -> Union[Cookie, None]:
    """Reduce a stored record to what the browser accepts, or None if unusable."""
    if not isinstance(record, dict):
        return None
    if not isinstance(record.get("name"), str) or not isinstance(record.get("value"), str):
        return None
    cookie = {key: record[key] for key in COOKIE_KEYS if key in record}
    same_site = cookie.get("sameSite")
    if not isinstance(same_site, str) or same_site not in SAME_SITE_VALUES:
        cookie.pop("sameSite", None)
    # add_cookies() needs either a url or a domain/path pair
    if "url" not in cookie and "domain" not in cookie:
        return None
    if "domain" in cookie:
        cookie.setdefault("path", "/")
    return cookie


class SessionStore:
    """
    Cookie blob stored as JSON on disk.

    Usage:
        store = SessionStore(Path("cookies.json"))
        cookies = await store.load()      # [] when nothing is stored yet
        await store.save(await context.cookies())
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def load(self) -> List[Cookie]:
        """Return the stored cookies; never raises."""
        if not self.path.exists():
            logger.info("No stored session at %s", self.path)
            return []

        try:
            async with aiofiles.open(self.path, "rb") as f:
                data = orjson.loads(await f.read())
        except (OSError, orjson.JSONDecodeError) as e:
            logger.warning("Could not load stored session %s: %s", self.path, e)
            return []

        if not isinstance(data, list):
            logger.warning("Stored session %s is not a cookie list, ignoring it", self.path)
            return []

        cookies = []
        for record in data:
            try:
                cookie = normalize_cookie(record)
            except Exception as e:
                logger.warning("Skipping unreadable stored cookie: %s", e)
                continue
            if cookie is not None:
                cookies.append(cookie)
        logger.info("Loaded %d stored cookies", len(cookies))
        return cookies

    async def save(self, cookies: List[Cookie]) -> None:
        """Overwrite the stored cookies (write to a temp file, then rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        async with aiofiles.open(tmp, "wb") as f:
            await f.write(orjson.dumps(list(cookies), option=orjson.OPT_INDENT_2))
        await aiofiles.os.replace(tmp, self.path)
        logger.info("Saved %d session cookies to %s", len(cookies), self.path)
