from __future__ import annotations

import threading
import time
from datetime import date, datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

from market_cache.application.cache_manager import CacheManager
from market_cache.application.use_cases import MarketDataContext, MarketDataService
from market_cache.domain.errors import SourceUnavailable
from market_cache.domain.models import CacheSnapshot, InstrumentClass, NavRecord, PriceRecord, Tier
from market_cache.domain.services import MetricsAggregator
from market_cache.infrastructure.remote.fetcher import RemoteFetcher
from market_cache.infrastructure.storage.snapshot_store import JsonSnapshotStore

TODAY = date(2026, 10, 16)


def make_price(symbol: str, price: str, change_percent: str = "0", as_of: date = TODAY) -> PriceRecord:
    return PriceRecord.from_change_percent(symbol, Decimal(price), Decimal(change_percent), as_of, "INR")


def make_nav(code: str, name: str, nav: str, as_of: date = TODAY) -> NavRecord:
    return NavRecord(scheme_code=code, scheme_name=name, nav=Decimal(nav), as_of_date=as_of)


def make_snapshot(instrument_class: InstrumentClass, records: list, as_of: date = TODAY, tier: Tier = Tier.REMOTE) -> CacheSnapshot:
    return CacheSnapshot.from_records(instrument_class, records, as_of, tier)


class Clock:
    def __init__(self, day: date = TODAY) -> None:
        self.current = datetime(day.year, day.month, day.day, 10, 0)

    def today(self) -> date:
        return self.current.date()

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class FakeSource:
    """Feed source returning canned records stamped with the requested day."""

    def __init__(
        self,
        instrument_class: InstrumentClass,
        records: list | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        name: str = "fake",
    ) -> None:
        self.name = name
        self.instrument_class = instrument_class
        self.records = records or []
        self.error = error
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def fetch_snapshot(self, today: date) -> CacheSnapshot:
        with self._lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return CacheSnapshot.from_records(self.instrument_class, list(self.records), today, Tier.REMOTE)


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text
        self.content = text.encode("utf-8")


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response or FakeResponse()
        self.error = error
        self.requests: list[dict] = []

    def get(self, url: str, **kwargs) -> FakeResponse:
        self.requests.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


def unavailable(name: str = "fake") -> SourceUnavailable:
    return SourceUnavailable(name, "connection refused")


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def store(tmp_path: Path) -> JsonSnapshotStore:
    return JsonSnapshotStore(tmp_path / "cache")


@pytest.fixture
def service_factory(store: JsonSnapshotStore, clock: Clock):
    def _build(*sources) -> MarketDataService:
        manager = CacheManager(
            store=store,
            fetcher=RemoteFetcher(list(sources)),
            today=clock.today,
            now=clock.now,
        )
        return MarketDataService(MarketDataContext(cache_manager=manager, aggregator=MetricsAggregator()))

    return _build
