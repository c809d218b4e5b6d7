"""Bundled last-known-good records used when no live or cached data exists."""
from __future__ import annotations

from datetime import date
from decimal import Decimal

from market_cache.domain.models import (
    CacheSnapshot,
    InstrumentClass,
    NavRecord,
    PriceRecord,
    Tier,
)

STATIC_AS_OF = date(2025, 1, 3)

# symbol, last price, percent change
STATIC_EQUITIES: tuple[tuple[str, str, str], ...] = (
    ("RELIANCE", "1251.15", "0.55"),
    ("TCS", "4101.45", "-0.42"),
    ("HDFCBANK", "1766.35", "-1.09"),
    ("INFY", "1937.80", "0.23"),
    ("HINDUNILVR", "2361.50", "0.71"),
    ("ICICIBANK", "1290.00", "0.52"),
    ("KOTAKBANK", "1807.25", "1.93"),
    ("BHARTIARTL", "1607.95", "-0.61"),
    ("ITC", "482.95", "0.19"),
    ("SBIN", "799.40", "-0.87"),
    ("ASIANPAINT", "2286.45", "0.84"),
    ("MARUTI", "11930.05", "0.29"),
    ("AXISBANK", "1085.20", "-0.73"),
    ("LT", "3628.90", "-0.27"),
    ("WIPRO", "300.55", "1.06"),
    ("TITAN", "3512.70", "0.46"),
)

# scheme code, scheme name, NAV
STATIC_FUNDS: tuple[tuple[str, str, str], ...] = (
    ("120503", "SBI Blue Chip Fund - Direct Plan - Growth", "96.4521"),
    ("120305", "SBI Large & Midcap Fund - Direct Plan - Growth", "612.8836"),
    ("119551", "HDFC Top 100 Fund - Direct Plan - Growth", "1173.2140"),
    ("120716", "Axis Bluechip Fund - Direct Plan - Growth", "65.8900"),
    ("118834", "Mirae Asset Large Cap Fund - Direct Plan - Growth", "118.1240"),
    ("118989", "ICICI Prudential Bluechip Fund - Direct Plan - Growth", "113.5100"),
    ("122639", "Parag Parikh Flexi Cap Fund - Direct Plan - Growth", "88.2417"),
    ("120847", "Quant Small Cap Fund - Direct Plan - Growth", "278.9104"),
    ("120465", "Kotak Flexicap Fund - Direct Plan - Growth", "87.9650"),
)


def _equity_records() -> list[PriceRecord]:
    return [
        PriceRecord.from_change_percent(symbol, Decimal(price), Decimal(change), STATIC_AS_OF, "INR")
        for symbol, price, change in STATIC_EQUITIES
    ]


def _fund_records() -> list[NavRecord]:
    return [
        NavRecord(scheme_code=code, scheme_name=name, nav=Decimal(nav), as_of_date=STATIC_AS_OF)
        for code, name, nav in STATIC_FUNDS
    ]


def load_static_snapshot(instrument_class: InstrumentClass) -> CacheSnapshot:
    """Terminal fallback; the snapshot keeps its original, generally stale, date."""
    if instrument_class is InstrumentClass.EQUITY:
        records = _equity_records()
    elif instrument_class is InstrumentClass.FUND:
        records = _fund_records()
    else:
        return CacheSnapshot.empty(instrument_class)
    return CacheSnapshot.from_records(instrument_class, records, STATIC_AS_OF, Tier.STATIC)
