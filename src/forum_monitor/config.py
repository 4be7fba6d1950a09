"""
Runtime configuration for the forum monitor.

Settings come from environment variables (a ``.env`` file in the working
directory is loaded first). Defaults live here as module constants so the
rest of the package can import them directly.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError
from .models import Credentials

# Number of browser contexts kept open by a worker pool
DEFAULT_POOL_SIZE = 5

# Deadline for every navigation and element wait (milliseconds)
DEFAULT_NAVIGATION_TIMEOUT_MS = 30_000

# Board scraped by /check-posts, relative to the forum root
DEFAULT_BOARD_PATH = "/f1-your-first-forum"

COOKIES_FILE = Path("cookies.json")

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000

# The forum drops idle sessions after an hour; refresh a little earlier
SESSION_REFRESH_MINUTES = 55.0

# Hosting platforms that sleep idle apps need a ping every few minutes
KEEPALIVE_MINUTES = 4.0


@dataclass
class Settings:
    """
    Everything the monitor needs to run a scrape cycle or serve HTTP.

    Attributes:
        forum_url: Forum root, without trailing slash
        username: Moderator account name
        password: Moderator account password
        board_path: Board listing path appended to ``forum_url``
        pool_size: Number of concurrent browser contexts
        navigation_timeout_ms: Deadline for navigations and element waits
        cookies_path: Where the session cookie blob is persisted
        host: Interface the HTTP server binds to
        port: Port the HTTP server listens on
        session_refresh_minutes: Interval of the background session refresh
                                 (0 disables it)
        keepalive_url: Public ``/ping`` URL to ping periodically, or None
        keepalive_minutes: Interval between keep-alive pings
        headless: Run Chromium without a window
    """
    forum_url: str
    username: str
    password: str
    board_path: str = DEFAULT_BOARD_PATH
    pool_size: int = DEFAULT_POOL_SIZE
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    cookies_path: Path = COOKIES_FILE
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    session_refresh_minutes: float = SESSION_REFRESH_MINUTES
    keepalive_url: Optional[str] = None
    keepalive_minutes: float = KEEPALIVE_MINUTES
    headless: bool = True

    def __post_init__(self):
        self.forum_url = self.forum_url.rstrip("/")
        if not self.board_path.startswith("/"):
            self.board_path = "/" + self.board_path
        if self.pool_size < 1:
            raise ConfigError(f"POOL_SIZE must be at least 1, got {self.pool_size}")
        if self.navigation_timeout_ms <= 0:
            raise ConfigError("NAVIGATION_TIMEOUT_MS must be positive")

    @property
    def board_url(self) -> str:
        return f"{self.forum_url}{self.board_path}"

    @property
    def credentials(self) -> Credentials:
        return Credentials(self.username, self.password)


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if not value:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_number(env: Mapping[str, str], name: str, default, cast=int):
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[str] = None,
) -> Settings:
    """
    Build Settings from the environment.

    Args:
        env: Mapping to read instead of ``os.environ`` (no ``.env`` loading
             happens when given)
        dotenv_path: Explicit ``.env`` file to load before reading

    Returns:
        A validated Settings instance

    Raises:
        ConfigError: if FORUM_URL, MOD_USERNAME or MOD_PASSWORD is missing,
                     or a numeric variable does not parse
    """
    if env is None:
        load_dotenv(dotenv_path)
        env = os.environ

    missing = [
        name for name in ("FORUM_URL", "MOD_USERNAME", "MOD_PASSWORD")
        if not env.get(name, "").strip()
    ]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    return Settings(
        forum_url=env["FORUM_URL"].strip(),
        username=env["MOD_USERNAME"].strip(),
        password=env["MOD_PASSWORD"],
        board_path=env.get("BOARD_PATH", "").strip() or DEFAULT_BOARD_PATH,
        pool_size=_parse_number(env, "POOL_SIZE", DEFAULT_POOL_SIZE),
        navigation_timeout_ms=_parse_number(
            env, "NAVIGATION_TIMEOUT_MS", DEFAULT_NAVIGATION_TIMEOUT_MS
        ),
        cookies_path=Path(env.get("COOKIES_PATH", "").strip() or COOKIES_FILE),
        host=env.get("HOST", "").strip() or DEFAULT_HOST,
        port=_parse_number(env, "PORT", DEFAULT_PORT),
        session_refresh_minutes=_parse_number(
            env, "SESSION_REFRESH_MINUTES", SESSION_REFRESH_MINUTES, float
        ),
        keepalive_url=env.get("KEEPALIVE_URL", "").strip() or None,
        keepalive_minutes=_parse_number(env, "KEEPALIVE_MINUTES", KEEPALIVE_MINUTES, float),
        headless=_parse_bool(env.get("HEADLESS"), default=True),
    )
