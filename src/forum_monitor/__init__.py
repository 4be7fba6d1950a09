"""
Forum Monitor

Logs a moderator account into a phpBB-style forum and reads the post body of
every topic on a board, using a bounded pool of headless Chromium contexts
that share one authenticated session.

Main components:
- ForumMonitor: Scrape coordinator (launch, authenticate, list, fetch, close)
- WorkerPool: Fixed-size pool of browser contexts with bounded dispatch
- Authenticator: Stored-cookie check with login-form fallback
- SessionStore: JSON cookie persistence
- fetch_post: Per-topic post body extraction

Usage:
    from forum_monitor import ForumMonitor, load_settings
    import asyncio

    monitor = ForumMonitor(load_settings())
    results = asyncio.run(monitor.run_check())
"""

from .auth import Authenticator
from .config import Settings, load_settings
from .errors import (
    AuthenticationError,
    ConfigError,
    ForumMonitorError,
    LoginTimeout,
    NavigationTimeout,
    PoolClosedError,
    PoolLaunchError,
    RootNavigationTimeout,
)
from .fetcher import fetch_post
from .models import Credentials, FetchResult, TopicReference
from .monitor import ForumMonitor
from .pool import BrowsingContext, Task, TaskOutcome, WorkerPool
from .session_store import SessionStore

__all__ = [
    'ForumMonitor',
    'WorkerPool',
    'BrowsingContext',
    'Task',
    'TaskOutcome',
    'Authenticator',
    'SessionStore',
    'fetch_post',
    'Settings',
    'load_settings',
    'Credentials',
    'FetchResult',
    'TopicReference',
    'ForumMonitorError',
    'ConfigError',
    'PoolLaunchError',
    'PoolClosedError',
    'NavigationTimeout',
    'AuthenticationError',
    'RootNavigationTimeout',
    'LoginTimeout',
]

__version__ = '1.0.0'
