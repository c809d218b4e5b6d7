"""Shared parsing utilities for feed ingestion."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

import pandas as pd

FEED_DATE_FORMATS = ("%d-%b-%Y", "%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y")


def ensure_text(source: str | bytes) -> str:
    if isinstance(source, str):
        return source
    if isinstance(source, bytes):
        return source.decode("utf-8", errors="replace")
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def looks_like_markup(text: str) -> bool:
    """True for HTML error or placeholder pages served in place of a feed."""
    head = text.lstrip()[:512].lower()
    return head.startswith("<") or "<html" in head or "<!doctype" in head


def read_rows(text: str, sep: str) -> pd.DataFrame:
    """Split delimited text positionally; short rows are padded with empty cells."""
    lines = pd.Series(text.splitlines(), dtype=object)
    lines = lines[lines.str.strip() != ""]
    if lines.empty:
        return pd.DataFrame()
    return lines.str.split(sep, expand=True, regex=False).fillna("")


def cell(row: pd.Series, position: int) -> str:
    if position >= len(row):
        return ""
    value = row.iloc[position]
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip().strip("\"").strip()


def parse_decimal(value: object) -> Decimal | None:
    """Parse a feed number; ``None`` when it is missing or not finite."""
    if value is None:
        return None
    s = str(value).strip()
    if not s or s in ("-", "N.A.", "NA"):
        return None
    for ch in [",", "₹", " "]:
        s = s.replace(ch, "")
    try:
        result = Decimal(s)
    except InvalidOperation:
        return None
    if not result.is_finite():
        return None
    return result


def parse_feed_date(value: object) -> date | None:
    s = str(value or "").strip()
    if not s:
        return None
    for fmt in FEED_DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None
