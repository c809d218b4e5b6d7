"""Daily market data cache and portfolio valuation engine."""
from market_cache.application.cache_manager import CacheManager
from market_cache.application.use_cases import MarketDataContext, MarketDataService, build_service
from market_cache.domain.models import (
    CacheSnapshot,
    CacheStatus,
    Holding,
    InstrumentClass,
    NavRecord,
    PortfolioMetrics,
    PriceRecord,
)
from market_cache.domain.services import MetricsAggregator, PortfolioValuator
from market_cache.infrastructure.remote.fetcher import HttpFeedSource, RemoteFetcher
from market_cache.infrastructure.storage.snapshot_store import JsonSnapshotStore

__all__ = [
    "CacheManager",
    "MarketDataContext",
    "MarketDataService",
    "build_service",
    "CacheSnapshot",
    "CacheStatus",
    "Holding",
    "InstrumentClass",
    "NavRecord",
    "PortfolioMetrics",
    "PriceRecord",
    "MetricsAggregator",
    "PortfolioValuator",
    "HttpFeedSource",
    "RemoteFetcher",
    "JsonSnapshotStore",
]
