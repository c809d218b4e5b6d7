"""Domain models for the market data cache.

These dataclasses capture the canonical schema for cached price and NAV records,
the date-stamped snapshots that hold them, and the holdings they value.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


class InstrumentClass(str, Enum):
    EQUITY = "equity"
    FUND = "fund"
    OTHER = "other"

    @classmethod
    def cached(cls) -> tuple["InstrumentClass", ...]:
        """Classes that own a cache slot."""
        return (cls.EQUITY, cls.FUND)


class Tier(str, Enum):
    """Where a snapshot came from in the fallback chain."""

    PERSISTENT = "persistent"
    REMOTE = "remote"
    STATIC = "static"
    EMPTY = "empty"


def normalize_symbol(symbol: object) -> str:
    if symbol is None:
        return ""
    value = str(symbol).strip().upper()
    if value.endswith(".NS") or value.endswith(".BO"):
        value = value[:-3]
    return value


@dataclass(frozen=True)
class PriceRecord:
    """Daily price of an equity instrument."""

    symbol: str
    price: Decimal
    prev_close: Decimal
    change: Decimal
    change_percent: Decimal
    as_of_date: date
    currency: str

    @property
    def key(self) -> str:
        return self.symbol

    @classmethod
    def from_change_percent(
        cls,
        symbol: str,
        price: Decimal,
        change_percent: Decimal,
        as_of_date: date,
        currency: str,
    ) -> "PriceRecord":
        """Back-derive previous close and absolute change from price and percent move.

        Uses ``price = prev_close * (1 + change_percent / 100)``.
        """
        growth = Decimal(1) + change_percent / HUNDRED
        if growth <= 0:
            raise ValueError(f"change percent {change_percent} leaves no positive previous close")
        prev_close = (price / growth).quantize(CENT)
        change = (price - prev_close).quantize(CENT)
        return cls(
            symbol=normalize_symbol(symbol),
            price=price,
            prev_close=prev_close,
            change=change,
            change_percent=change_percent,
            as_of_date=as_of_date,
            currency=currency,
        )


@dataclass(frozen=True)
class NavRecord:
    """Net asset value of a fund scheme on a given date."""

    scheme_code: str
    scheme_name: str
    nav: Decimal
    as_of_date: date

    @property
    def key(self) -> str:
        return self.scheme_code


Record = Union[PriceRecord, NavRecord]


@dataclass(frozen=True)
class CacheSnapshot:
    """Immutable, date-stamped set of records for one instrument class."""

    instrument_class: InstrumentClass
    as_of_date: date | None
    records: Mapping[str, Record] = field(default_factory=dict)
    tier: Tier = Tier.EMPTY

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", MappingProxyType(dict(self.records)))

    @classmethod
    def empty(cls, instrument_class: InstrumentClass) -> "CacheSnapshot":
        return cls(instrument_class=instrument_class, as_of_date=None, records={}, tier=Tier.EMPTY)

    @classmethod
    def from_records(
        cls,
        instrument_class: InstrumentClass,
        records: list[Record],
        as_of_date: date | None,
        tier: Tier,
    ) -> "CacheSnapshot":
        return cls(
            instrument_class=instrument_class,
            as_of_date=as_of_date,
            records={record.key: record for record in records},
            tier=tier,
        )

    def __len__(self) -> int:
        return len(self.records)

    def is_empty(self) -> bool:
        return not self.records

    def is_valid_on(self, day: date) -> bool:
        return bool(self.records) and self.as_of_date == day

    def with_tier(self, tier: Tier) -> "CacheSnapshot":
        return CacheSnapshot(
            instrument_class=self.instrument_class,
            as_of_date=self.as_of_date,
            records=self.records,
            tier=tier,
        )

    def get(self, key: str) -> Record | None:
        return self.records.get(key)


@dataclass(frozen=True)
class Holding:
    """Caller-owned position; the engine only ever returns updated copies."""

    instrument_class: InstrumentClass
    key: str | None = None
    quantity: Decimal = Decimal("0")
    average_cost: Decimal | None = None
    current_value: Decimal = Decimal("0")
    market_price: Decimal | None = None
    day_change: Decimal | None = None
    day_change_percent: Decimal | None = None
    last_priced_at: date | None = None
    invested_value: Decimal | None = None
    name: str | None = None


@dataclass(frozen=True)
class PortfolioMetrics:
    total_value: Decimal
    total_invested: Decimal
    total_return: Decimal
    total_return_percent: Decimal
    day_change: Decimal
    day_change_percent: Decimal


@dataclass(frozen=True)
class CacheStatus:
    """Diagnostic view of one cache slot."""

    instrument_class: InstrumentClass
    available: bool
    count: int
    as_of_date: date | None
    tier: Tier
    state: str
    last_fetch_date: date | None = None

    def as_dict(self) -> dict[str, object]:
        return {
            "instrument_class": self.instrument_class.value,
            "available": self.available,
            "count": self.count,
            "as_of_date": self.as_of_date.isoformat() if self.as_of_date else None,
            "tier": self.tier.value,
            "state": self.state,
            "last_fetch_date": self.last_fetch_date.isoformat() if self.last_fetch_date else None,
        }
