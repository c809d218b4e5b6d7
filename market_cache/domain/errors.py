"""Failure taxonomy for feed ingestion and cache persistence."""
from __future__ import annotations


class MarketCacheError(Exception):
    """Base class for recoverable market cache failures."""


class SourceUnavailable(MarketCacheError):
    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class MalformedRow(MarketCacheError):
    def __init__(self, line: int, reason: str) -> None:
        super().__init__(f"row {line}: {reason}")
        self.line = line
        self.reason = reason


class EmptyFeed(MarketCacheError):
    def __init__(self, source: str) -> None:
        super().__init__(f"{source}: no usable records")
        self.source = source


class PersistenceWriteFailure(MarketCacheError):
    def __init__(self, instrument_class: str, reason: str) -> None:
        super().__init__(f"could not persist {instrument_class} snapshot: {reason}")
        self.instrument_class = instrument_class
        self.reason = reason
