"""Tests for board page parsing."""

import logging

from forum_monitor.models import TopicReference
from forum_monitor.utils import extract_topic_links, same_host


FORUM = "https://forum.example.org"
BOARD = f"{FORUM}/f1-your-first-forum"

SAMPLE_BOARD_HTML = """
<html>
<body>
<ul class="topiclist">
  <li><a class="topictitle" href="./viewtopic.php?t=12">Welcome</a></li>
  <li><a class="topictitle" href="/viewtopic.php?t=34#p99">Rules</a></li>
  <li><a class="topictitle" href="https://forum.example.org/viewtopic.php?t=56">Absolute</a></li>
  <li><a class="topictitle" href="https://evil.example.com/phish">Malicious Link</a></li>
  <li><a class="topictitle" href="javascript:void(0)">Script</a></li>
  <li><a class="topictitle">No href</a></li>
  <li><a class="topictitle" href="/viewtopic.php?t=12">Welcome again</a></li>
  <li><span class="topictitle"><a href="/viewtopic.php?t=78">Wrapped</a></span></li>
</ul>
<a class="lastpost" href="/viewtopic.php?t=90">Not a title</a>
</body>
</html>
"""


class TestSameHost:
    def test_forum_host(self):
        assert same_host(f"{FORUM}/viewtopic.php?t=1", FORUM)

    def test_other_host(self):
        assert not same_host("https://evil.example.com/steal", FORUM)

    def test_non_http_scheme(self):
        assert not same_host("javascript:alert(1)", FORUM)
        assert not same_host("mailto:admin@forum.example.org", FORUM)

    def test_internal_ip(self):
        assert not same_host("http://169.254.169.254/latest/meta-data/", FORUM)


class TestExtractTopicLinks:
    def test_extracts_in_document_order(self):
        refs = extract_topic_links(SAMPLE_BOARD_HTML, BOARD, FORUM)
        assert refs == [
            TopicReference(f"{FORUM}/viewtopic.php?t=12"),
            TopicReference(f"{FORUM}/viewtopic.php?t=34"),
            TopicReference(f"{FORUM}/viewtopic.php?t=56"),
            TopicReference(f"{FORUM}/viewtopic.php?t=78"),
        ]

    def test_filters_external_links(self):
        refs = extract_topic_links(SAMPLE_BOARD_HTML, BOARD, FORUM)
        assert not any("evil.example.com" in ref.url for ref in refs)

    def test_defaults_forum_to_page_host(self):
        refs = extract_topic_links(SAMPLE_BOARD_HTML, BOARD)
        assert len(refs) == 4

    def test_empty_board(self):
        assert extract_topic_links("<html><body></body></html>", BOARD, FORUM) == []

    def test_keeps_links_after_redirect_to_alias_host(self):
        html = (
            '<a class="topictitle" href="/t-1">One</a>'
            '<a class="topictitle" href="/t-2">Two</a>'
        )
        refs = extract_topic_links(html, "https://www.forum.example.org/f1", FORUM)
        assert refs == [
            TopicReference("https://www.forum.example.org/t-1"),
            TopicReference("https://www.forum.example.org/t-2"),
        ]

    def test_keeps_absolute_links_to_forum_host(self):
        html = f'<a class="topictitle" href="{FORUM}/t-1">One</a>'
        refs = extract_topic_links(html, "https://www.forum.example.org/f1", FORUM)
        assert refs == [TopicReference(f"{FORUM}/t-1")]

    def test_logs_skipped_links(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="forum_monitor.utils"):
            extract_topic_links(SAMPLE_BOARD_HTML, BOARD, FORUM)
        assert "https://evil.example.com/phish" in caplog.text
