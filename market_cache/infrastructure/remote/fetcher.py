"""Remote feed sources tried in priority order."""
from __future__ import annotations

from datetime import date
import logging
from typing import Callable, Sequence

import requests

from market_cache.domain.errors import EmptyFeed, SourceUnavailable
from market_cache.domain.models import CacheSnapshot, InstrumentClass, Tier
from market_cache.domain.repositories import FeedSource
from market_cache.domain.results import ParseResult
from market_cache.infrastructure.parsing.amfi import parse_fund_feed
from market_cache.infrastructure.parsing.equity import parse_equity_feed
from market_cache.infrastructure.parsing.utils import looks_like_markup

_LOGGER = logging.getLogger(__name__)

FeedParser = Callable[[str, date], ParseResult]


def equity_parser(currency: str) -> FeedParser:
    def _parse(text: str, today: date) -> ParseResult:
        return parse_equity_feed(text, as_of_date=today, currency=currency)

    return _parse


def fund_parser(text: str, today: date) -> ParseResult:
    return parse_fund_feed(text)


class HttpFeedSource:
    """Downloads one feed URL and parses it with the parser for its class."""

    def __init__(
        self,
        url: str,
        instrument_class: InstrumentClass,
        parser: FeedParser,
        timeout: float = 15.0,
        session: requests.Session | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.name = url
        self.url = url
        self.instrument_class = instrument_class
        self._parser = parser
        self._timeout = timeout
        self._session = session or requests.Session()
        self._headers = headers or {}

    def fetch_snapshot(self, today: date) -> CacheSnapshot:
        _LOGGER.debug("Feed request url=%s timeout=%s", self.url, self._timeout)
        try:
            resp = self._session.get(self.url, timeout=self._timeout, headers=self._headers)
        except requests.exceptions.Timeout as err:
            raise SourceUnavailable(self.name, f"timed out after {self._timeout}s") from err
        except requests.exceptions.RequestException as err:
            raise SourceUnavailable(self.name, str(err)) from err

        _LOGGER.debug("Feed response status=%s bytes=%s", resp.status_code, len(resp.content or b""))
        if resp.status_code != 200:
            raise SourceUnavailable(self.name, f"HTTP {resp.status_code}")
        text = resp.text or ""
        if looks_like_markup(text):
            raise SourceUnavailable(self.name, "received an HTML page instead of feed data")

        result = self._parser(text, today)
        if result.skipped:
            _LOGGER.debug("%s: skipped %d malformed rows", self.name, result.skipped)
        return result.to_snapshot(self.instrument_class, today, Tier.REMOTE)


class RemoteFetcher:
    """Returns the first non-empty snapshot from an ordered list of sources.

    Never raises: every failure degrades to an empty snapshot.
    """

    def __init__(self, sources: Sequence[FeedSource]) -> None:
        self._sources = list(sources)

    def sources_for(self, instrument_class: InstrumentClass) -> list[FeedSource]:
        return [source for source in self._sources if source.instrument_class is instrument_class]

    def fetch(self, instrument_class: InstrumentClass, today: date) -> CacheSnapshot:
        for source in self.sources_for(instrument_class):
            try:
                snapshot = source.fetch_snapshot(today)
                if snapshot.is_empty():
                    raise EmptyFeed(source.name)
            except (SourceUnavailable, EmptyFeed) as err:
                _LOGGER.debug("Source failed, trying next: %s", err)
                continue
            except Exception as err:  # malformed payloads must not escape the fetcher
                _LOGGER.debug("Unexpected failure from %s: %s", source.name, err)
                continue
            _LOGGER.info("Fetched %d %s records from %s", len(snapshot), instrument_class.value, source.name)
            return snapshot.with_tier(Tier.REMOTE)

        _LOGGER.warning("All %s sources failed", instrument_class.value)
        return CacheSnapshot.empty(instrument_class)


def build_http_sources(
    equity_urls: Sequence[str],
    fund_urls: Sequence[str],
    timeout: float,
    currency: str,
    user_agent: str,
    session: requests.Session | None = None,
) -> list[HttpFeedSource]:
    session = session or requests.Session()
    headers = {"User-Agent": user_agent}
    sources = [
        HttpFeedSource(url, InstrumentClass.EQUITY, equity_parser(currency), timeout, session, headers)
        for url in equity_urls
    ]
    sources.extend(
        HttpFeedSource(url, InstrumentClass.FUND, fund_parser, timeout, session, headers) for url in fund_urls
    )
    return sources
