"""Exception types raised by the forum monitor."""


class ForumMonitorError(Exception):
    """Base class for all forum monitor errors."""


class ConfigError(ForumMonitorError):
    """Required configuration is missing or malformed."""


class PoolLaunchError(ForumMonitorError):
    """The browser engine could not be started."""


class PoolClosedError(ForumMonitorError):
    """Work was submitted to a pool that has already been closed."""


class NavigationTimeout(ForumMonitorError):
    """A page navigation did not reach DOM content loaded before the deadline."""


class AuthenticationError(ForumMonitorError):
    """The pool could not establish a logged-in session."""


class RootNavigationTimeout(NavigationTimeout, AuthenticationError):
    """The forum root did not load while checking the session."""


class LoginTimeout(AuthenticationError):
    """The login form flow did not complete before the deadline."""
