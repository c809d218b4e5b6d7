import pytest
import requests

from conftest import TODAY, FakeResponse, FakeSession, FakeSource, make_nav, make_price, unavailable
from market_cache.domain.errors import SourceUnavailable
from market_cache.domain.models import InstrumentClass, Tier
from market_cache.infrastructure.remote.fetcher import (
    HttpFeedSource,
    RemoteFetcher,
    build_http_sources,
    equity_parser,
    fund_parser,
)


def test_first_non_empty_source_wins():
    empty = FakeSource(InstrumentClass.EQUITY, records=[], name="empty")
    primary = FakeSource(InstrumentClass.EQUITY, records=[make_price("ABC", "110", "10")], name="primary")
    backup = FakeSource(InstrumentClass.EQUITY, records=[make_price("XYZ", "5")], name="backup")
    fetcher = RemoteFetcher([empty, primary, backup])

    snapshot = fetcher.fetch(InstrumentClass.EQUITY, TODAY)

    assert list(snapshot.records) == ["ABC"]
    assert snapshot.tier is Tier.REMOTE
    assert (empty.calls, primary.calls, backup.calls) == (1, 1, 0)


def test_failed_source_advances_to_next():
    broken = FakeSource(InstrumentClass.FUND, error=unavailable("broken"))
    weird = FakeSource(InstrumentClass.FUND, error=RuntimeError("bad payload"))
    good = FakeSource(InstrumentClass.FUND, records=[make_nav("120503", "SBI Blue Chip", "96.45")])

    snapshot = RemoteFetcher([broken, weird, good]).fetch(InstrumentClass.FUND, TODAY)

    assert "120503" in snapshot.records


def test_all_sources_failing_returns_empty_snapshot():
    fetcher = RemoteFetcher([FakeSource(InstrumentClass.EQUITY, error=unavailable())])

    snapshot = fetcher.fetch(InstrumentClass.EQUITY, TODAY)

    assert snapshot.is_empty()
    assert snapshot.tier is Tier.EMPTY


def test_sources_are_filtered_by_class():
    fund = FakeSource(InstrumentClass.FUND, records=[make_nav("1", "Fund", "10")])

    snapshot = RemoteFetcher([fund]).fetch(InstrumentClass.EQUITY, TODAY)

    assert snapshot.is_empty()
    assert fund.calls == 0


def test_http_source_parses_feed_and_passes_timeout():
    session = FakeSession(FakeResponse(200, "ABC,110,10\nbroken row\n"))
    source = HttpFeedSource("https://feed/eq.csv", InstrumentClass.EQUITY, equity_parser("INR"), timeout=3, session=session)

    snapshot = source.fetch_snapshot(TODAY)

    assert snapshot.get("ABC").as_of_date == TODAY
    assert session.requests[0]["timeout"] == 3


def test_http_source_rejects_html_placeholder():
    session = FakeSession(FakeResponse(200, "<!DOCTYPE html><html><body>Service unavailable</body></html>"))
    source = HttpFeedSource("https://feed/nav.txt", InstrumentClass.FUND, fund_parser, session=session)

    with pytest.raises(SourceUnavailable):
        source.fetch_snapshot(TODAY)


def test_http_error_status_is_source_unavailable():
    session = FakeSession(FakeResponse(503, "busy"))
    source = HttpFeedSource("https://feed/nav.txt", InstrumentClass.FUND, fund_parser, session=session)

    with pytest.raises(SourceUnavailable, match="HTTP 503"):
        source.fetch_snapshot(TODAY)


def test_timeout_moves_on_to_next_source():
    slow = HttpFeedSource(
        "https://slow/nav.txt",
        InstrumentClass.FUND,
        fund_parser,
        timeout=0.5,
        session=FakeSession(error=requests.exceptions.ReadTimeout("read timed out")),
    )
    good = FakeSource(InstrumentClass.FUND, records=[make_nav("1", "Fund", "10")])

    snapshot = RemoteFetcher([slow, good]).fetch(InstrumentClass.FUND, TODAY)

    assert list(snapshot.records) == ["1"]
    assert good.calls == 1


def test_build_http_sources_keeps_priority_order():
    sources = build_http_sources(
        equity_urls=["https://a/eq.csv"],
        fund_urls=["https://a/nav.txt", "https://b/nav.txt"],
        timeout=5,
        currency="INR",
        user_agent="test-agent",
        session=FakeSession(),
    )

    assert [(s.instrument_class, s.url) for s in sources] == [
        (InstrumentClass.EQUITY, "https://a/eq.csv"),
        (InstrumentClass.FUND, "https://a/nav.txt"),
        (InstrumentClass.FUND, "https://b/nav.txt"),
    ]
