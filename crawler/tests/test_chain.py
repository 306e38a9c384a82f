import pytest

from crawler.pipelines.chain import ExtractionChain
from crawler.schemas.models import ExtractedPage
from crawler.strategies.base import ExtractionStrategy
from dailynews.errors import ConfigError, ExtractionError, ExtractionExhausted, ProviderError

URL = "https://example.com/story"
GOOD_BODY = "A body that is comfortably longer than the fifty character minimum."


class FakeStrategy(ExtractionStrategy):
    def __init__(self, name, outcome, preferred=False, log=None):
        self.name = name
        self.outcome = outcome
        self.preferred = preferred
        self.log = log if log is not None else []

    def prefers(self, url):
        return self.preferred

    def extract(self, url):
        self.log.append(self.name)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def _page(title="Title", body=GOOD_BODY):
    return ExtractedPage(title=title, body=body)


def test_first_accepted_result_wins():
    log = []
    chain = ExtractionChain(
        [
            FakeStrategy("direct_html", _page("Direct"), log=log),
            FakeStrategy("reader_proxy", _page("Proxy"), log=log),
        ]
    )
    page = chain.extract(URL)
    assert page.title == "Direct"
    assert page.strategy == "direct_html"
    assert log == ["direct_html"]


def test_falls_through_in_declared_order():
    log = []
    chain = ExtractionChain(
        [
            FakeStrategy("direct_html", ProviderError("Access denied (403)", status=403), log=log),
            FakeStrategy("reader_proxy", _page(body="too short"), log=log),
            FakeStrategy("ai_extraction", _page("From AI"), log=log),
        ]
    )
    page = chain.extract(URL)
    assert page.title == "From AI"
    assert page.strategy == "ai_extraction"
    assert log == ["direct_html", "reader_proxy", "ai_extraction"]


def test_exhaustion_reports_every_attempt_and_last_real_cause():
    content_error = ExtractionError("Failed to extract title and content from webpage")
    chain = ExtractionChain(
        [
            FakeStrategy("direct_html", ProviderError("Page not found (404)", status=404)),
            FakeStrategy("reader_proxy", content_error),
            FakeStrategy("ai_extraction", ConfigError("Gemini API key not configured")),
        ]
    )
    with pytest.raises(ExtractionExhausted) as info:
        chain.extract(URL)

    exc = info.value
    assert [name for name, _reason in exc.attempts] == ["direct_html", "reader_proxy", "ai_extraction"]
    assert exc.cause is content_error
    assert exc.url == URL
    assert "Gemini API key not configured" in exc.attempts[2][1]


def test_exhaustion_with_only_config_errors_keeps_last_one():
    last = ConfigError("second")
    chain = ExtractionChain([FakeStrategy("a", ConfigError("first")), FakeStrategy("b", last)])
    with pytest.raises(ExtractionExhausted) as info:
        chain.extract(URL)
    assert info.value.cause is last


def test_empty_chain_is_exhausted_immediately():
    with pytest.raises(ExtractionExhausted) as info:
        ExtractionChain([]).extract(URL)
    assert info.value.attempts == []
    assert info.value.cause is None


def test_preferred_strategy_runs_first():
    log = []
    chain = ExtractionChain(
        [
            FakeStrategy("direct_html", _page("Direct"), log=log),
            FakeStrategy("reader_proxy", ProviderError("proxy down", status=502), preferred=True, log=log),
            FakeStrategy("ai_extraction", _page("AI"), log=log),
        ]
    )
    page = chain.extract("https://mp.weixin.qq.com/s/abc")
    assert log == ["reader_proxy", "direct_html"]
    assert page.title == "Direct"


def test_accepted_body_is_cleaned():
    messy = "  First   line  \n\n\n\n\n  Second line that makes this long enough to pass.  "
    page = ExtractionChain([FakeStrategy("direct_html", _page(body=messy))]).extract(URL)
    assert page.body == "First line\n\nSecond line that makes this long enough to pass."


def test_blank_title_is_rejected():
    log = []
    chain = ExtractionChain(
        [
            FakeStrategy("direct_html", _page(title="   "), log=log),
            FakeStrategy("ai_extraction", _page("Titled"), log=log),
        ]
    )
    assert chain.extract(URL).title == "Titled"
    assert log == ["direct_html", "ai_extraction"]
