"""Shared fixtures and test paths."""
import sys
from pathlib import Path

import pytest

# Add src/ to path so tests can import the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from forum_monitor.config import Settings  # noqa: E402
from forum_monitor.session_store import SessionStore  # noqa: E402

from fakes import FORUM_URL, FakeFactory, FakeForum  # noqa: E402


@pytest.fixture
def forum():
    return FakeForum(username="mod", password="secret")


@pytest.fixture
def factory(forum):
    return FakeFactory(forum)


@pytest.fixture
def store(tmp_path):
    return SessionStore(tmp_path / "cookies.json")


@pytest.fixture
def settings(tmp_path):
    return Settings(
        forum_url=FORUM_URL,
        username="mod",
        password="secret",
        board_path="/f1-your-first-forum",
        pool_size=3,
        navigation_timeout_ms=1000,
        cookies_path=tmp_path / "cookies.json",
        session_refresh_minutes=0,
    )
