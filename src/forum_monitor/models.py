"""
Data models for the forum monitor.

These are the small typed records passed between the scrape coordinator,
the worker pool and the HTTP layer. Dataclasses keep them explicit and make
JSON serialization a one-liner.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Credentials:
    """Moderator account used for the login form."""
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class TopicReference:
    """
    Locator of a single forum topic, discovered from a board listing.

    Attributes:
        url: Absolute URL of the topic page

    Example:
        ref = TopicReference("https://forum.example.org/viewtopic.php?t=42")
    """
    url: str

    def __str__(self) -> str:
        return self.url


@dataclass
class FetchResult:
    """
    Outcome of fetching one topic's post body.

    Attributes:
        ref: The topic that was fetched
        content: Trimmed post body text, or None when the fetch failed.
                 A missing post container is not a failure: it yields the
                 literal "no content found".

    Example:
        result = FetchResult(
            ref=TopicReference("https://forum.example.org/viewtopic.php?t=42"),
            content="Welcome to the forum!"
        )
    """
    ref: TopicReference
    content: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True when the topic was fetched (even if it had no post body)."""
        return self.content is not None

    def to_dict(self) -> dict:
        """Convert the result to the JSON shape served by ``/check-posts``."""
        return {"href": self.ref.url, "content": self.content}
