"""
HTTP surface of the forum monitor.

Routes:
    POST /check-posts  run one scrape cycle and return the posts as JSON
    GET  /ping         liveness probe, always "pong"

Two background jobs run for the lifetime of the app: a periodic session
refresh that keeps the forum login warm, and an optional keep-alive ping of
the app's own public URL for hosts that put idle apps to sleep.
"""

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Optional

import httpx
from aiohttp import web

from .config import Settings
from .monitor import ForumMonitor

logger = logging.getLogger(__name__)

MONITOR_KEY = web.AppKey("monitor", ForumMonitor)
SETTINGS_KEY = web.AppKey("settings", Settings)

KEEPALIVE_TIMEOUT = 10.0


async def check_posts(request: web.Request) -> web.Response:
    monitor = request.app[MONITOR_KEY]
    try:
        results = await monitor.run_check()
    except Exception as e:
        logger.error("Error in /check-posts: %s", e)
        return web.json_response({"success": False, "error": str(e)}, status=500)
    return web.json_response({"success": True, "posts": [r.to_dict() for r in results]})


async def ping(request: web.Request) -> web.Response:
    return web.Response(text="pong")


async def _every(
    minutes: float, job: Callable[[], Awaitable[None]], name: str
) -> None:
    """Run ``job`` every ``minutes`` until cancelled; failures are logged."""
    while True:
        await asyncio.sleep(minutes * 60)
        try:
            await job()
        except Exception as e:
            logger.error("Error during %s: %s", name, e)


async def _ping_self(client: httpx.AsyncClient, url: str) -> None:
    response = await client.get(url)
    response.raise_for_status()
    logger.debug("Keep-alive ping %s -> %d", url, response.status_code)


async def background_jobs(app: web.Application):
    """cleanup_ctx hook: start the periodic jobs, cancel them on shutdown."""
    settings = app[SETTINGS_KEY]
    monitor = app[MONITOR_KEY]
    tasks = []
    client = None

    if settings.session_refresh_minutes > 0:
        tasks.append(asyncio.create_task(
            _every(settings.session_refresh_minutes, monitor.refresh_session, "session refresh")
        ))

    if settings.keepalive_url:
        client = httpx.AsyncClient(timeout=KEEPALIVE_TIMEOUT, follow_redirects=True)
        url = settings.keepalive_url
        tasks.append(asyncio.create_task(
            _every(settings.keepalive_minutes, lambda: _ping_self(client, url), "keep-alive ping")
        ))

    yield

    for task in tasks:
        task.cancel()
    for task in tasks:
        with contextlib.suppress(asyncio.CancelledError):
            await task
    if client is not None:
        await client.aclose()


def create_app(settings: Settings, monitor: Optional[ForumMonitor] = None) -> web.Application:
    app = web.Application()
    app[SETTINGS_KEY] = settings
    app[MONITOR_KEY] = monitor or ForumMonitor(settings)
    app.router.add_post("/check-posts", check_posts)
    app.router.add_get("/ping", ping)
    app.cleanup_ctx.append(background_jobs)
    return app


def run_server(settings: Settings) -> None:
    """Serve until SIGINT/SIGTERM; pending cycles close their pools on the way out."""
    app = create_app(settings)
    logger.info("Server running at http://%s:%d", settings.host, settings.port)
    web.run_app(app, host=settings.host, port=settings.port, print=None)
