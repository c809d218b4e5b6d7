"""Report generators for cached records and cache status."""
from __future__ import annotations

import csv
import io
from typing import Sequence

from market_cache.domain.models import CacheStatus, NavRecord, Record


def records_to_rows(records: Sequence[Record]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for record in records:
        if isinstance(record, NavRecord):
            rows.append(
                {
                    "scheme_code": record.scheme_code,
                    "scheme_name": record.scheme_name,
                    "nav": str(record.nav),
                    "date": record.as_of_date.isoformat(),
                }
            )
        else:
            rows.append(
                {
                    "symbol": record.symbol,
                    "price": str(record.price),
                    "prev_close": str(record.prev_close),
                    "change": str(record.change),
                    "change_percent": str(record.change_percent),
                    "currency": record.currency,
                    "date": record.as_of_date.isoformat(),
                }
            )
    return rows


def render_csv(records: Sequence[Record]) -> bytes:
    rows = records_to_rows(records)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(rows[0].keys()) if rows else [])
    if rows:
        writer.writeheader()
        writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_status(statuses: Sequence[CacheStatus]) -> str:
    lines = ["Market Data Cache", "================="]
    for status in statuses:
        as_of = status.as_of_date.isoformat() if status.as_of_date else "-"
        lines.append(
            f"{status.instrument_class.value:<7} {status.state:<9} {status.count:>7,} items  "
            f"as of {as_of}  (tier: {status.tier.value})"
        )
    last_fetch = next((s.last_fetch_date for s in statuses if s.last_fetch_date), None)
    lines.append(f"Last successful fetch: {last_fetch.isoformat() if last_fetch else 'never'}")
    return "\n".join(lines)
