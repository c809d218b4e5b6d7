"""Domain-level results for feed parsing."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Sequence

from .errors import MalformedRow
from .models import CacheSnapshot, InstrumentClass, Record, Tier


@dataclass(frozen=True)
class RowOutcome:
    """Result of parsing one feed row: either a record or the reason it was skipped."""

    record: Record | None = None
    error: MalformedRow | None = None

    @classmethod
    def accepted(cls, record: Record) -> "RowOutcome":
        return cls(record=record)

    @classmethod
    def skipped(cls, line: int, reason: str) -> "RowOutcome":
        return cls(error=MalformedRow(line, reason))

    @property
    def ok(self) -> bool:
        return self.record is not None


@dataclass(frozen=True)
class ParseResult:
    records: Sequence[Record] = field(default_factory=tuple)
    errors: Sequence[MalformedRow] = field(default_factory=tuple)

    @property
    def skipped(self) -> int:
        return len(self.errors)

    @classmethod
    def collect(cls, outcomes: Iterable[RowOutcome]) -> "ParseResult":
        records: list[Record] = []
        errors: list[MalformedRow] = []
        for outcome in outcomes:
            if outcome.record is not None:
                records.append(outcome.record)
            elif outcome.error is not None:
                errors.append(outcome.error)
        return cls(records=tuple(records), errors=tuple(errors))

    def to_snapshot(
        self,
        instrument_class: InstrumentClass,
        as_of_date: date | None,
        tier: Tier = Tier.REMOTE,
    ) -> CacheSnapshot:
        if not self.records:
            return CacheSnapshot.empty(instrument_class)
        return CacheSnapshot.from_records(instrument_class, list(self.records), as_of_date, tier)
