"""Tests for the HTTP routes and background jobs."""

import asyncio

import httpx
from aiohttp import test_utils

from forum_monitor.errors import LoginTimeout
from forum_monitor.models import FetchResult, TopicReference
from forum_monitor.server import _every, _ping_self, create_app


class StubMonitor:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.checks = 0
        self.refreshes = 0

    async def run_check(self):
        self.checks += 1
        if self.error:
            raise self.error
        return self.results

    async def refresh_session(self):
        self.refreshes += 1


def request(settings, monitor, method, path):
    async def scenario():
        app = create_app(settings, monitor)
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            response = await client.request(method, path)
            if response.content_type == "application/json":
                return response.status, await response.json()
            return response.status, await response.text()
    return asyncio.run(scenario())


class TestRoutes:
    def test_ping(self, settings):
        monitor = StubMonitor()
        assert request(settings, monitor, "GET", "/ping") == (200, "pong")
        assert monitor.checks == 0

    def test_check_posts_success(self, settings):
        monitor = StubMonitor(results=[
            FetchResult(TopicReference("https://forum.example.org/t-1"), "hello"),
            FetchResult(TopicReference("https://forum.example.org/t-2"), None),
        ])
        status, body = request(settings, monitor, "POST", "/check-posts")
        assert status == 200
        assert body == {
            "success": True,
            "posts": [
                {"href": "https://forum.example.org/t-1", "content": "hello"},
                {"href": "https://forum.example.org/t-2", "content": None},
            ],
        }

    def test_check_posts_failure_is_structured(self, settings):
        monitor = StubMonitor(error=LoginTimeout("Timed out logging in as mod"))
        status, body = request(settings, monitor, "POST", "/check-posts")
        assert status == 500
        assert body == {"success": False, "error": "Timed out logging in as mod"}

    def test_check_posts_requires_post(self, settings):
        status, _ = request(settings, StubMonitor(), "GET", "/check-posts")
        assert status == 405


class TestBackgroundJobs:
    def test_every_repeats_and_survives_errors(self):
        calls = []

        async def job():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("browser crashed")

        async def scenario():
            task = asyncio.create_task(_every(0.0001, job, "test job"))
            while len(calls) < 3:
                await asyncio.sleep(0.005)
            task.cancel()

        asyncio.run(asyncio.wait_for(scenario(), 5))
        assert len(calls) >= 3

    def test_refresh_job_runs_with_app(self, settings):
        settings.session_refresh_minutes = 0.0001
        monitor = StubMonitor()

        async def scenario():
            async with test_utils.TestClient(test_utils.TestServer(create_app(settings, monitor))):
                while monitor.refreshes < 2:
                    await asyncio.sleep(0.005)

        asyncio.run(asyncio.wait_for(scenario(), 5))
        assert monitor.refreshes >= 2

    def test_ping_self(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, text="pong")

        async def scenario():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                await _ping_self(client, "https://bot.example.app/ping")

        asyncio.run(scenario())
        assert seen == ["https://bot.example.app/ping"]
