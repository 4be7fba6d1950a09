"""Tests for data models."""

import pytest

from forum_monitor.models import FetchResult, TopicReference
from forum_monitor.pool import Task, TaskOutcome


class TestTopicReference:
    def test_str_is_url(self):
        assert str(TopicReference("https://f.org/t-1")) == "https://f.org/t-1"

    def test_immutable(self):
        ref = TopicReference("https://f.org/t-1")
        with pytest.raises(AttributeError):
            ref.url = "https://f.org/t-2"


class TestFetchResult:
    def test_defaults(self):
        result = FetchResult(TopicReference("https://f.org/t-1"))
        assert result.content is None
        assert not result.ok

    def test_no_content_counts_as_fetched(self):
        assert FetchResult(TopicReference("u"), "no content found").ok

    def test_to_dict(self):
        result = FetchResult(TopicReference("https://f.org/t-1"), "hello")
        assert result.to_dict() == {"href": "https://f.org/t-1", "content": "hello"}


class TestTask:
    def test_label(self):
        async def fetch_topic(ctx):
            pass
        assert str(Task(fetch_topic, "https://f.org/t-1")) == "https://f.org/t-1"
        assert str(Task(fetch_topic)) == "fetch_topic"

    def test_outcome(self):
        assert TaskOutcome(value=3).ok
        assert not TaskOutcome(error=RuntimeError("x")).ok
