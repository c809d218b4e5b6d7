"""Equity price feed parser producing canonical price records.

Rows are positional ``symbol, price, change_percent``; trailing columns are
ignored and header rows fail validation like any other bad row.
"""
from __future__ import annotations

import logging
from datetime import date
from decimal import DecimalException

import pandas as pd

from market_cache.domain.models import PriceRecord, normalize_symbol
from market_cache.domain.results import ParseResult, RowOutcome
from market_cache.infrastructure.parsing.utils import (
    cell,
    ensure_text,
    parse_decimal,
    read_rows,
)

_LOGGER = logging.getLogger(__name__)

SYMBOL_COLUMN = 0
PRICE_COLUMN = 1
CHANGE_PERCENT_COLUMN = 2
DELIMITER = ","


def parse_equity_row(row: pd.Series, line: int, as_of_date: date, currency: str) -> RowOutcome:
    symbol = normalize_symbol(cell(row, SYMBOL_COLUMN))
    if not symbol:
        return RowOutcome.skipped(line, "missing symbol")
    price = parse_decimal(cell(row, PRICE_COLUMN))
    if price is None or price <= 0:
        return RowOutcome.skipped(line, f"invalid price for {symbol}")
    change_percent = parse_decimal(cell(row, CHANGE_PERCENT_COLUMN))
    if change_percent is None:
        return RowOutcome.skipped(line, f"invalid change percent for {symbol}")
    try:
        record = PriceRecord.from_change_percent(symbol, price, change_percent, as_of_date, currency)
    except ValueError as err:
        return RowOutcome.skipped(line, str(err))
    except DecimalException as err:
        return RowOutcome.skipped(line, f"price for {symbol} out of range: {err!r}")
    if record.prev_close <= 0:
        return RowOutcome.skipped(line, f"non-positive previous close for {symbol}")
    return RowOutcome.accepted(record)


def parse_equity_feed(source: str | bytes, as_of_date: date, currency: str = "INR") -> ParseResult:
    text = ensure_text(source)
    rows = read_rows(text, DELIMITER)
    result = ParseResult.collect(
        parse_equity_row(row, int(line) + 1, as_of_date, currency) for line, row in rows.iterrows()
    )
    _LOGGER.debug("Parsed %d equity rows, skipped %d", len(result.records), result.skipped)
    return result
