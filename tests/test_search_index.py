from conftest import FakeSource, make_nav, make_price, make_snapshot
from market_cache.domain.models import InstrumentClass
from market_cache.domain.search import SearchIndex


def equity_index(symbols: list[str]) -> SearchIndex:
    return SearchIndex(make_snapshot(InstrumentClass.EQUITY, [make_price(s, "10") for s in symbols]))


def test_single_character_query_returns_nothing():
    index = equity_index(["ABC", "ABD"])

    assert index.search("A") == []
    assert index.search(" a ") == []
    assert index.search(None) == []


def test_results_are_capped_at_ten():
    symbols = [f"AB{i:02d}" for i in range(50)] + ["XYZ"]
    index = equity_index(symbols)

    results = index.search("AB")

    assert len(results) == 10
    assert [r.symbol for r in results] == [f"AB{i:02d}" for i in range(10)]


def test_matching_is_case_insensitive_substring():
    index = equity_index(["HDFCBANK", "ICICIBANK", "TCS"])

    assert [r.symbol for r in index.search("bank")] == ["HDFCBANK", "ICICIBANK"]


def test_prefix_matches_rank_first():
    index = equity_index(["XABC", "ABZ", "ZZAB", "ABA"])

    assert [r.symbol for r in index.search("ab")] == ["ABA", "ABZ", "XABC", "ZZAB"]


def test_fund_search_matches_scheme_name():
    snapshot = make_snapshot(
        InstrumentClass.FUND,
        [
            make_nav("120716", "Axis Bluechip Fund - Direct Plan - Growth", "65.89"),
            make_nav("120503", "SBI Blue Chip Fund - Direct Plan - Growth", "96.45"),
            make_nav("118989", "ICICI Prudential Bluechip Fund", "113.51"),
        ],
    )

    results = SearchIndex(snapshot).search("BLUECHIP")

    assert [r.scheme_code for r in results] == ["120716", "118989"]


def test_custom_limit_and_minimum_length():
    index = SearchIndex(
        make_snapshot(InstrumentClass.EQUITY, [make_price(s, "1") for s in ("AAA", "AAB", "AAC")]),
        limit=2,
        min_query_length=3,
    )

    assert index.search("AA") == []
    assert len(index.search("AAA")) == 1
    assert len(SearchIndex(index.snapshot, limit=2).search("AA")) == 2


def test_service_search_skips_resolution_for_short_query(service_factory):
    source = FakeSource(InstrumentClass.EQUITY, records=[make_price("ABC", "10")])
    service = service_factory(source)

    assert service.search(InstrumentClass.EQUITY, "A") == []
    assert source.calls == 0

    assert [r.symbol for r in service.search(InstrumentClass.EQUITY, "ab")] == ["ABC"]
    assert source.calls == 1
