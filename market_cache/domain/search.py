"""Case-insensitive substring lookup over a cached snapshot."""
from __future__ import annotations

from .models import CacheSnapshot, NavRecord, Record

DEFAULT_LIMIT = 10
MIN_QUERY_LENGTH = 2


def _search_text(record: Record) -> str:
    if isinstance(record, NavRecord):
        return record.scheme_name
    return record.symbol


class SearchIndex:
    """Matches against the symbol for equities and the scheme name for funds.

    Results are ordered prefix matches first, then other substring matches,
    each lexicographically, so the capped result set is deterministic.
    """

    def __init__(
        self,
        snapshot: CacheSnapshot,
        limit: int = DEFAULT_LIMIT,
        min_query_length: int = MIN_QUERY_LENGTH,
    ) -> None:
        self._snapshot = snapshot
        self._limit = limit
        self._min_query_length = min_query_length
        self._entries = sorted(
            ((_search_text(record).lower(), record.key, record) for record in snapshot.records.values()),
            key=lambda entry: (entry[0], entry[1]),
        )

    @property
    def snapshot(self) -> CacheSnapshot:
        return self._snapshot

    def search(self, query: str | None) -> list[Record]:
        needle = (query or "").strip().lower()
        if len(needle) < self._min_query_length:
            return []

        prefix: list[Record] = []
        contains: list[Record] = []
        for text, _, record in self._entries:
            if text.startswith(needle):
                prefix.append(record)
                if len(prefix) >= self._limit:
                    break
            elif needle in text and len(contains) < self._limit:
                contains.append(record)
        return (prefix + contains)[: self._limit]
