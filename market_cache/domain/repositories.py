"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from datetime import date
from typing import Protocol

from .models import CacheSnapshot, InstrumentClass


class FeedSource(Protocol):
    """One remote endpoint able to produce a snapshot for a single instrument class."""

    name: str
    instrument_class: InstrumentClass

    def fetch_snapshot(self, today: date) -> CacheSnapshot:
        """Return the parsed snapshot; raise ``SourceUnavailable`` on transport failure."""
        ...


class SnapshotStore(Protocol):
    """Durable key-value storage of the last fetched snapshot per class."""

    def save(self, instrument_class: InstrumentClass, snapshot: CacheSnapshot) -> None:
        ...

    def load(self, instrument_class: InstrumentClass, today: date) -> CacheSnapshot | None:
        ...

    def clear(self, instrument_class: InstrumentClass) -> None:
        ...

    def last_fetch_date(self) -> date | None:
        ...
