"""Command-line entrypoint for inspecting and maintaining the market cache."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from market_cache.application.use_cases import MarketDataService, build_service
from market_cache.config import load_settings
from market_cache.domain.models import InstrumentClass, NavRecord
from market_cache.presentation.cache_report import render_csv, render_status

CLASS_CHOICES = [instrument_class.value for instrument_class in InstrumentClass.cached()]


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect and maintain the daily market data cache")
    parser.add_argument("--settings", type=str, help="Path to a JSON settings override file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Resolve both caches and print their status")

    search = sub.add_parser("search", help="Search cached instruments")
    search.add_argument("instrument_class", choices=CLASS_CHOICES)
    search.add_argument("query", type=str)

    refresh = sub.add_parser("refresh", help="Force a re-fetch from the remote feeds")
    refresh.add_argument("instrument_class", nargs="?", choices=CLASS_CHOICES)

    clear = sub.add_parser("clear", help="Drop the in-memory and persisted snapshot")
    clear.add_argument("instrument_class", choices=CLASS_CHOICES)

    export = sub.add_parser("export", help="Write all cached records as CSV")
    export.add_argument("instrument_class", choices=CLASS_CHOICES)
    export.add_argument("--output", type=str, help="Destination file (defaults to stdout)")
    return parser.parse_args(argv)


def _print_status(service: MarketDataService) -> None:
    print(render_status([service.cache_status(c) for c in InstrumentClass.cached()]))


def main(argv: list[str] | None = None, service: MarketDataService | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if service is None:
        settings = load_settings(Path(args.settings) if args.settings else None)
        service = build_service(settings)

    if args.command == "status":
        for instrument_class in InstrumentClass.cached():
            service.resolve_prices(instrument_class)
        _print_status(service)
        return 0

    if args.command == "search":
        instrument_class = InstrumentClass(args.instrument_class)
        results = service.search(instrument_class, args.query)
        if not results:
            print("No matches.")
            return 1
        for record in results:
            if isinstance(record, NavRecord):
                print(f"{record.scheme_code:<8} {record.nav:>12} {record.as_of_date}  {record.scheme_name}")
            else:
                print(f"{record.symbol:<12} {record.price:>12} {record.change_percent:>7}%  {record.as_of_date}")
        return 0

    if args.command == "refresh":
        if args.instrument_class:
            service.refresh(InstrumentClass(args.instrument_class))
        else:
            service.refresh_all()
        _print_status(service)
        return 0

    if args.command == "clear":
        service.clear(InstrumentClass(args.instrument_class))
        print(f"Cleared {args.instrument_class} cache.")
        return 0

    if args.command == "export":
        instrument_class = InstrumentClass(args.instrument_class)
        service.resolve_prices(instrument_class)
        payload = render_csv(service.list_cached(instrument_class))
        if args.output:
            Path(args.output).write_bytes(payload)
            print(f"Wrote {args.output}")
        else:
            sys.stdout.write(payload.decode("utf-8"))
        return 0

    return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
