"""Application services exposing the market cache to the rest of the application."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from market_cache.application.cache_manager import CacheManager
from market_cache.config import SETTINGS, Settings
from market_cache.domain.models import (
    CacheSnapshot,
    CacheStatus,
    Holding,
    InstrumentClass,
    NavRecord,
    PortfolioMetrics,
    PriceRecord,
    Record,
    normalize_symbol,
)
from market_cache.domain.search import SearchIndex
from market_cache.domain.services import MetricsAggregator, PortfolioValuator
from market_cache.infrastructure.remote.fetcher import RemoteFetcher, build_http_sources
from market_cache.infrastructure.storage.snapshot_store import JsonSnapshotStore


@dataclass(slots=True)
class MarketDataContext:
    cache_manager: CacheManager
    aggregator: MetricsAggregator
    search_limit: int = 10
    min_query_length: int = 2


class MarketDataService:
    def __init__(self, context: MarketDataContext) -> None:
        self._context = context
        self._indexes: dict[InstrumentClass, SearchIndex] = {}

    @property
    def cache_manager(self) -> CacheManager:
        return self._context.cache_manager

    def resolve_prices(self, instrument_class: InstrumentClass) -> CacheSnapshot:
        return self.cache_manager.resolve(instrument_class)

    def search(self, instrument_class: InstrumentClass, query: str | None) -> list[Record]:
        if len((query or "").strip()) < self._context.min_query_length:
            return []
        return self._index_for(self.resolve_prices(instrument_class)).search(query)

    def reprice(self, holdings: Sequence[Holding]) -> list[Holding]:
        """Value holdings against whatever is in memory; does not fetch."""
        valuator = PortfolioValuator(
            equities=self.cache_manager.current(InstrumentClass.EQUITY),
            funds=self.cache_manager.current(InstrumentClass.FUND),
        )
        return valuator.reprice(holdings)

    def update_portfolio_values(self, holdings: Sequence[Holding]) -> list[Holding]:
        classes = {holding.instrument_class for holding in holdings}
        for instrument_class in InstrumentClass.cached():
            if instrument_class in classes:
                self.resolve_prices(instrument_class)
        return self.reprice(holdings)

    def aggregate(self, holdings: Sequence[Holding]) -> PortfolioMetrics:
        return self._context.aggregator.aggregate(holdings)

    def get_price(self, symbol: str) -> PriceRecord | None:
        record = self.resolve_prices(InstrumentClass.EQUITY).get(normalize_symbol(symbol))
        return record if isinstance(record, PriceRecord) else None

    def get_latest_nav(self, scheme_code: str) -> NavRecord | None:
        record = self.resolve_prices(InstrumentClass.FUND).get(str(scheme_code).strip())
        return record if isinstance(record, NavRecord) else None

    def list_cached(self, instrument_class: InstrumentClass) -> list[Record]:
        snapshot = self.cache_manager.current(instrument_class)
        if snapshot is None:
            return []
        return [snapshot.records[key] for key in sorted(snapshot.records)]

    def refresh(self, instrument_class: InstrumentClass) -> CacheSnapshot:
        return self.cache_manager.refresh(instrument_class)

    def refresh_all(self) -> dict[InstrumentClass, CacheSnapshot]:
        return self.cache_manager.refresh_all()

    def clear(self, instrument_class: InstrumentClass) -> None:
        self.cache_manager.clear(instrument_class)
        self._indexes.pop(instrument_class, None)

    def cache_status(self, instrument_class: InstrumentClass) -> CacheStatus:
        return self.cache_manager.status(instrument_class)

    def _index_for(self, snapshot: CacheSnapshot) -> SearchIndex:
        index = self._indexes.get(snapshot.instrument_class)
        if index is None or index.snapshot is not snapshot:
            index = SearchIndex(
                snapshot,
                limit=self._context.search_limit,
                min_query_length=self._context.min_query_length,
            )
            self._indexes[snapshot.instrument_class] = index
        return index


def build_service(settings: Settings = SETTINGS) -> MarketDataService:
    """Wire the production graph: JSON store, HTTP feeds, bundled fallback."""
    sources = build_http_sources(
        equity_urls=settings.equity_sources,
        fund_urls=settings.fund_sources,
        timeout=settings.request_timeout,
        currency=settings.default_currency,
        user_agent=settings.user_agent,
    )
    manager = CacheManager(
        store=JsonSnapshotStore(settings.cache_dir),
        fetcher=RemoteFetcher(sources),
        fallback_retry_interval=settings.fallback_retry_interval,
    )
    return MarketDataService(
        MarketDataContext(
            cache_manager=manager,
            aggregator=MetricsAggregator(),
            search_limit=settings.search_limit,
            min_query_length=settings.min_query_length,
        )
    )
