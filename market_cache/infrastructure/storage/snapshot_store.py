"""JSON file storage for the last fetched snapshot of each instrument class."""
from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
import json
import logging
import os
import tempfile
from typing import Any

from market_cache.domain.errors import PersistenceWriteFailure
from market_cache.domain.models import (
    CacheSnapshot,
    InstrumentClass,
    NavRecord,
    PriceRecord,
    Record,
    Tier,
)

_LOGGER = logging.getLogger(__name__)

META_FILE = "meta.json"


def _record_to_dict(record: Record) -> dict[str, str]:
    if isinstance(record, PriceRecord):
        return {
            "symbol": record.symbol,
            "price": str(record.price),
            "prev_close": str(record.prev_close),
            "change": str(record.change),
            "change_percent": str(record.change_percent),
            "as_of_date": record.as_of_date.isoformat(),
            "currency": record.currency,
        }
    return {
        "scheme_code": record.scheme_code,
        "scheme_name": record.scheme_name,
        "nav": str(record.nav),
        "as_of_date": record.as_of_date.isoformat(),
    }


def _record_from_dict(instrument_class: InstrumentClass, raw: dict[str, Any]) -> Record:
    if instrument_class is InstrumentClass.EQUITY:
        return PriceRecord(
            symbol=str(raw["symbol"]),
            price=Decimal(raw["price"]),
            prev_close=Decimal(raw["prev_close"]),
            change=Decimal(raw["change"]),
            change_percent=Decimal(raw["change_percent"]),
            as_of_date=date.fromisoformat(raw["as_of_date"]),
            currency=str(raw["currency"]),
        )
    return NavRecord(
        scheme_code=str(raw["scheme_code"]),
        scheme_name=str(raw["scheme_name"]),
        nav=Decimal(raw["nav"]),
        as_of_date=date.fromisoformat(raw["as_of_date"]),
    )


def _require_slot(instrument_class: InstrumentClass) -> None:
    if instrument_class not in InstrumentClass.cached():
        raise ValueError(f"No cache slot for instrument class {instrument_class.value!r}")


class JsonSnapshotStore:
    """One JSON document per class plus a shared ``meta.json``.

    Files are replaced atomically so a reader never sees a half-written slot.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def _slot_path(self, instrument_class: InstrumentClass) -> Path:
        return self._root / f"{instrument_class.value}.json"

    def _write_json(self, path: Path, payload: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # unique temp name per write; equity and fund saves share meta.json
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=path.name, suffix=".tmp", delete=False
        ) as handle:
            tmp_path = Path(handle.name)
            try:
                json.dump(payload, handle, ensure_ascii=False)
            except (OSError, TypeError, ValueError):
                handle.close()
                tmp_path.unlink(missing_ok=True)
                raise
        try:
            os.replace(tmp_path, path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def _read_json(self, path: Path) -> dict[str, Any] | None:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as err:
            _LOGGER.warning("Ignoring unreadable cache file %s: %s", path, err)
            return None
        return data if isinstance(data, dict) else None

    def save(self, instrument_class: InstrumentClass, snapshot: CacheSnapshot) -> None:
        _require_slot(instrument_class)
        if snapshot.as_of_date is None:
            raise PersistenceWriteFailure(instrument_class.value, "snapshot has no as-of date")
        payload = {
            "instrument_class": instrument_class.value,
            "as_of_date": snapshot.as_of_date.isoformat(),
            "records": [_record_to_dict(record) for record in snapshot.records.values()],
        }
        try:
            self._write_json(self._slot_path(instrument_class), payload)
            self._write_json(self._root / META_FILE, {"last_fetch_date": snapshot.as_of_date.isoformat()})
        except (OSError, TypeError, ValueError) as err:
            raise PersistenceWriteFailure(instrument_class.value, str(err)) from err
        _LOGGER.debug("Persisted %d %s records for %s", len(snapshot), instrument_class.value, snapshot.as_of_date)

    def load(self, instrument_class: InstrumentClass, today: date) -> CacheSnapshot | None:
        _require_slot(instrument_class)
        data = self._read_json(self._slot_path(instrument_class))
        if data is None:
            return None
        try:
            as_of_date = date.fromisoformat(str(data.get("as_of_date")))
        except ValueError:
            return None
        if as_of_date != today:
            _LOGGER.debug("Stored %s snapshot from %s is stale", instrument_class.value, as_of_date)
            return None
        try:
            records = [_record_from_dict(instrument_class, raw) for raw in data.get("records") or []]
        except (KeyError, TypeError, ValueError, InvalidOperation) as err:
            _LOGGER.warning("Discarding corrupt %s cache slot: %s", instrument_class.value, err)
            return None
        if not records:
            return None
        return CacheSnapshot.from_records(instrument_class, records, as_of_date, Tier.PERSISTENT)

    def clear(self, instrument_class: InstrumentClass) -> None:
        _require_slot(instrument_class)
        path = self._slot_path(instrument_class)
        try:
            path.unlink()
        except FileNotFoundError:
            return

    def last_fetch_date(self) -> date | None:
        data = self._read_json(self._root / META_FILE)
        if not data or not data.get("last_fetch_date"):
            return None
        try:
            return date.fromisoformat(str(data["last_fetch_date"]))
        except ValueError:
            return None
