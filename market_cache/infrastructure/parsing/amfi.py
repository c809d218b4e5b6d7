"""AMFI NAVAll fund feed parser producing canonical NAV records.

The feed is ``;``-delimited::

    Scheme Code;ISIN Div Payout/ ISIN Growth;ISIN Div Reinvestment;Scheme Name;Net Asset Value;Date

interleaved with blank lines and fund-house / category headings, which fail
validation and are skipped.
"""
from __future__ import annotations

import logging

import pandas as pd

from market_cache.domain.models import NavRecord
from market_cache.domain.results import ParseResult, RowOutcome
from market_cache.infrastructure.parsing.utils import (
    cell,
    ensure_text,
    parse_decimal,
    parse_feed_date,
    read_rows,
)

_LOGGER = logging.getLogger(__name__)

SCHEME_CODE_COLUMN = 0
SCHEME_NAME_COLUMN = 3
NAV_COLUMN = 4
DATE_COLUMN = 5
DELIMITER = ";"


def parse_fund_row(row: pd.Series, line: int) -> RowOutcome:
    scheme_code = cell(row, SCHEME_CODE_COLUMN)
    if not scheme_code:
        return RowOutcome.skipped(line, "missing scheme code")
    nav = parse_decimal(cell(row, NAV_COLUMN))
    if nav is None or nav <= 0:
        return RowOutcome.skipped(line, f"invalid NAV for scheme {scheme_code}")
    as_of_date = parse_feed_date(cell(row, DATE_COLUMN))
    if as_of_date is None:
        return RowOutcome.skipped(line, f"invalid date for scheme {scheme_code}")
    return RowOutcome.accepted(
        NavRecord(
            scheme_code=scheme_code,
            scheme_name=cell(row, SCHEME_NAME_COLUMN) or scheme_code,
            nav=nav,
            as_of_date=as_of_date,
        )
    )


def parse_fund_feed(source: str | bytes) -> ParseResult:
    text = ensure_text(source)
    rows = read_rows(text, DELIMITER)
    result = ParseResult.collect(parse_fund_row(row, int(line) + 1) for line, row in rows.iterrows())
    _LOGGER.debug("Parsed %d fund rows, skipped %d", len(result.records), result.skipped)
    return result
