"""Domain services implementing valuation rules."""
from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Callable, Mapping, Sequence

from .models import (
    HUNDRED,
    CacheSnapshot,
    Holding,
    InstrumentClass,
    NavRecord,
    PortfolioMetrics,
    PriceRecord,
    normalize_symbol,
)

ZERO = Decimal("0")


class PortfolioValuator:
    """Re-prices holdings against cached snapshots without triggering any fetch."""

    def __init__(self, equities: CacheSnapshot | None, funds: CacheSnapshot | None) -> None:
        self._equities = equities
        self._funds = funds
        self._handlers: Mapping[InstrumentClass, Callable[[Holding], Holding]] = {
            InstrumentClass.EQUITY: self._reprice_equity,
            InstrumentClass.FUND: self._reprice_fund,
            InstrumentClass.OTHER: self._pass_through,
        }
        missing = set(InstrumentClass) - set(self._handlers)
        if missing:
            raise ValueError(f"No valuation handler for {sorted(m.value for m in missing)}")

    def reprice(self, holdings: Sequence[Holding]) -> list[Holding]:
        return [self._handlers[holding.instrument_class](holding) for holding in holdings]

    def _reprice_equity(self, holding: Holding) -> Holding:
        if not holding.key or self._equities is None:
            return holding
        record = self._equities.get(normalize_symbol(holding.key))
        if not isinstance(record, PriceRecord):
            return holding
        return replace(
            holding,
            market_price=record.price,
            day_change=record.change,
            day_change_percent=record.change_percent,
            current_value=_quantity(holding) * record.price,
            last_priced_at=record.as_of_date,
        )

    def _reprice_fund(self, holding: Holding) -> Holding:
        if not holding.key or self._funds is None:
            return holding
        record = self._funds.get(str(holding.key).strip())
        if not isinstance(record, NavRecord):
            return holding
        return replace(
            holding,
            market_price=record.nav,
            current_value=_quantity(holding) * record.nav,
            last_priced_at=record.as_of_date,
        )

    @staticmethod
    def _pass_through(holding: Holding) -> Holding:
        return holding


class MetricsAggregator:
    """Computes portfolio totals and returns from the current holding set."""

    def aggregate(self, holdings: Sequence[Holding]) -> PortfolioMetrics:
        total_value = sum((h.current_value or ZERO for h in holdings), ZERO)
        total_invested = sum((self._invested(h) for h in holdings), ZERO)
        day_change = sum((h.day_change for h in holdings if h.day_change is not None), ZERO)

        total_return = total_value - total_invested
        return PortfolioMetrics(
            total_value=total_value,
            total_invested=total_invested,
            total_return=total_return,
            total_return_percent=self._percent(total_return, total_invested),
            day_change=day_change,
            day_change_percent=self._percent(day_change, total_value - day_change),
        )

    @staticmethod
    def _invested(holding: Holding) -> Decimal:
        if holding.invested_value is not None:
            return holding.invested_value
        if holding.average_cost is None:
            return ZERO
        return holding.average_cost * _quantity(holding)

    @staticmethod
    def _percent(numerator: Decimal, denominator: Decimal) -> Decimal:
        if denominator == 0:
            return ZERO
        return numerator / denominator * HUNDRED


def _quantity(holding: Holding) -> Decimal:
    return holding.quantity if holding.quantity is not None else ZERO
