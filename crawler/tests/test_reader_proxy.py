from datetime import date
from types import SimpleNamespace

import pytest

from crawler.strategies.reader_proxy import ReaderProxyStrategy, parse_snapshot
from dailynews.errors import ExtractionError

SNAPSHOT = """Title: Example Post

URL Source: https://medium.com/@someone/example-post

Published Time: 2024-03-01T10:00:00.000Z

Markdown Content:
# Example Post

![header image](https://cdn.example.com/header.png)

This is the [first](https://example.com/ref) paragraph of the post, and it is long enough to keep.

Second   paragraph with    odd spacing.
"""


class RecordingFetcher:
    def __init__(self, text):
        self.text = text
        self.calls = []

    def fetch(self, url, headers=None):
        self.calls.append((url, headers or {}))
        return SimpleNamespace(text=self.text, status_code=200)


def test_parse_snapshot_reads_headers_and_body():
    page = parse_snapshot(SNAPSHOT)
    assert page.title == "Example Post"
    assert page.publish_date == date(2024, 3, 1)
    assert "![" not in page.body
    assert "This is the first paragraph" in page.body
    assert "https://example.com/ref" not in page.body


def test_parse_snapshot_without_header_block_uses_first_heading():
    page = parse_snapshot("# Plain Heading\n\nSome body text that came back without any headers.")
    assert page.title == "Plain Heading"
    assert page.publish_date is None


def test_parse_snapshot_rejects_empty_text():
    with pytest.raises(ExtractionError):
        parse_snapshot("   ")


def test_strategy_fetches_through_proxy_and_cleans_body():
    fetcher = RecordingFetcher(SNAPSHOT)
    strategy = ReaderProxyStrategy(fetcher, base_url="https://r.jina.ai/", api_key="secret-token")

    result = strategy.attempt("https://medium.com/@someone/example-post")

    assert result.ok
    url, headers = fetcher.calls[0]
    assert url == "https://r.jina.ai/https://medium.com/@someone/example-post"
    assert headers["Authorization"] == "Bearer secret-token"
    assert result.page.strategy == "reader_proxy"
    assert "Second paragraph with odd spacing." in result.page.body


def test_strategy_without_key_sends_no_authorization():
    fetcher = RecordingFetcher(SNAPSHOT)
    ReaderProxyStrategy(fetcher).attempt("https://example.com/a")
    _url, headers = fetcher.calls[0]
    assert "Authorization" not in headers


@pytest.mark.parametrize(
    "url, preferred",
    [
        ("https://mp.weixin.qq.com/s/abc", True),
        ("https://x.com/someone/status/1", True),
        ("https://twitter.com/someone/status/1", True),
        ("https://someone.medium.com/post", True),
        ("https://www.zhihu.com/question/1", True),
        ("https://www.linkedin.com/pulse/post", True),
        ("https://example.com/story", False),
        ("https://notmedium.com/post", False),
    ],
)
def test_preferred_sites(url, preferred):
    assert ReaderProxyStrategy(RecordingFetcher("")).prefers(url) is preferred


def test_snapshot_without_any_title_is_untitled_but_accepted():
    body = "Plain text returned by the reader with no heading at all. " * 3
    fetcher = RecordingFetcher(body)
    result = ReaderProxyStrategy(fetcher).attempt("https://example.com/no-title")
    assert parse_snapshot(body).title == "Untitled"
    assert result.ok
    assert result.page.title == "Untitled"
