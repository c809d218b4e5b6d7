"""Tiered resolution of price snapshots with per-class single-flight."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
import logging
import threading
from typing import Callable

from market_cache.domain.errors import PersistenceWriteFailure
from market_cache.domain.models import CacheSnapshot, CacheStatus, InstrumentClass, Tier
from market_cache.domain.repositories import SnapshotStore
from market_cache.infrastructure.remote.fetcher import RemoteFetcher
from market_cache.infrastructure.static.bundled import load_static_snapshot

_LOGGER = logging.getLogger(__name__)

STATE_EMPTY = "empty"
STATE_FRESH = "fresh"
STATE_STALE = "stale"
STATE_FALLBACK = "fallback"


@dataclass
class _Slot:
    # (snapshot, resolved_at), always replaced as one value
    entry: tuple[CacheSnapshot, datetime] | None = None
    lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def snapshot(self) -> CacheSnapshot | None:
        entry = self.entry
        return entry[0] if entry is not None else None


class CacheManager:
    """Owns the in-memory snapshot per instrument class.

    Resolution consults memory, the persistent store, the remote feeds and the
    bundled static snapshot, in that order, and keeps the first non-empty
    result. One lock per class makes concurrent readers wait for an in-flight
    resolution instead of fetching again.
    """

    def __init__(
        self,
        store: SnapshotStore,
        fetcher: RemoteFetcher,
        static_loader: Callable[[InstrumentClass], CacheSnapshot] = load_static_snapshot,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = datetime.now,
        fallback_retry_interval: timedelta = timedelta(minutes=15),
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._static_loader = static_loader
        self._today = today
        self._now = now
        self._fallback_retry_interval = fallback_retry_interval
        self._slots = {instrument_class: _Slot() for instrument_class in InstrumentClass.cached()}

    def _slot(self, instrument_class: InstrumentClass) -> _Slot:
        try:
            return self._slots[instrument_class]
        except KeyError:
            raise ValueError(f"No cache slot for instrument class {instrument_class.value!r}") from None

    def _usable(self, slot: _Slot) -> CacheSnapshot | None:
        entry = slot.entry
        if entry is None:
            return None
        snapshot, resolved_at = entry
        today = self._today()
        if snapshot.is_valid_on(today):
            return snapshot
        # a static fallback is never fresh, it is only held back from retrying the feeds
        if snapshot.tier is Tier.STATIC:
            if resolved_at.date() == today and self._now() - resolved_at < self._fallback_retry_interval:
                return snapshot
        return None

    def resolve(self, instrument_class: InstrumentClass) -> CacheSnapshot:
        slot = self._slot(instrument_class)
        snapshot = self._usable(slot)
        if snapshot is not None:
            return snapshot
        with slot.lock:
            snapshot = self._usable(slot)
            if snapshot is not None:
                return snapshot
            return self._resolve_locked(instrument_class, slot, use_persistent=True)

    def refresh(self, instrument_class: InstrumentClass) -> CacheSnapshot:
        """Re-fetch, skipping memory and the persistent store but keeping the static fallback."""
        slot = self._slot(instrument_class)
        with slot.lock:
            return self._resolve_locked(instrument_class, slot, use_persistent=False)

    def refresh_all(self) -> dict[InstrumentClass, CacheSnapshot]:
        return {instrument_class: self.refresh(instrument_class) for instrument_class in self._slots}

    def clear(self, instrument_class: InstrumentClass) -> None:
        slot = self._slot(instrument_class)
        with slot.lock:
            slot.entry = None
            self._store.clear(instrument_class)
        _LOGGER.info("Cleared %s cache", instrument_class.value)

    def current(self, instrument_class: InstrumentClass) -> CacheSnapshot | None:
        """In-memory snapshot as it stands, possibly stale; never fetches."""
        return self._slot(instrument_class).snapshot

    def status(self, instrument_class: InstrumentClass) -> CacheStatus:
        snapshot = self._slot(instrument_class).snapshot
        if snapshot is None or snapshot.is_empty():
            state = STATE_EMPTY
        elif snapshot.tier is Tier.STATIC:
            state = STATE_FALLBACK
        elif snapshot.is_valid_on(self._today()):
            state = STATE_FRESH
        else:
            state = STATE_STALE

        try:
            last_fetch_date = self._store.last_fetch_date()
        except OSError as err:
            _LOGGER.debug("Could not read last fetch date: %s", err)
            last_fetch_date = None

        return CacheStatus(
            instrument_class=instrument_class,
            available=state != STATE_EMPTY,
            count=len(snapshot) if snapshot is not None else 0,
            as_of_date=snapshot.as_of_date if snapshot is not None else None,
            tier=snapshot.tier if snapshot is not None else Tier.EMPTY,
            state=state,
            last_fetch_date=last_fetch_date,
        )

    def _resolve_locked(
        self,
        instrument_class: InstrumentClass,
        slot: _Slot,
        use_persistent: bool,
    ) -> CacheSnapshot:
        today = self._today()
        snapshot: CacheSnapshot | None = None

        if use_persistent:
            snapshot = self._load_persistent(instrument_class, today)

        if snapshot is None:
            remote = self._fetcher.fetch(instrument_class, today)
            if not remote.is_empty():
                snapshot = remote
                self._persist(instrument_class, remote)

        if snapshot is None:
            fallback = self._static_loader(instrument_class)
            if not fallback.is_empty():
                _LOGGER.warning(
                    "Using bundled %s snapshot from %s", instrument_class.value, fallback.as_of_date
                )
                snapshot = fallback

        if snapshot is None:
            _LOGGER.warning("No %s prices available from any tier", instrument_class.value)
            slot.entry = None
            return CacheSnapshot.empty(instrument_class)

        slot.entry = (snapshot, self._now())
        _LOGGER.info(
            "Resolved %d %s records from %s tier (as of %s)",
            len(snapshot),
            instrument_class.value,
            snapshot.tier.value,
            snapshot.as_of_date,
        )
        return snapshot

    def _load_persistent(self, instrument_class: InstrumentClass, today: date) -> CacheSnapshot | None:
        try:
            snapshot = self._store.load(instrument_class, today)
        except OSError as err:
            _LOGGER.warning("Could not read persisted %s snapshot: %s", instrument_class.value, err)
            return None
        if snapshot is None or snapshot.is_empty():
            return None
        return snapshot

    def _persist(self, instrument_class: InstrumentClass, snapshot: CacheSnapshot) -> None:
        try:
            self._store.save(instrument_class, snapshot)
        except PersistenceWriteFailure as err:
            _LOGGER.warning("%s; continuing with in-memory snapshot", err)
