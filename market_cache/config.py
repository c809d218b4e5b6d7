"""Central configuration for the market cache package."""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import timedelta
from pathlib import Path
import json
import logging
from typing import Any

_LOGGER = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"
CACHE_DIR = DATA_DIR / "market_cache"
OVERRIDE_PATH = BASE_DIR / "settings_override.json"

# Equity feeds publish positional rows of symbol, last price and percent change
# (e.g. a spreadsheet exported as CSV); none is bundled, set them in the override file.
EQUITY_SOURCES: tuple[str, ...] = ()
FUND_SOURCES = (
    "https://www.amfiindia.com/spages/NAVAll.txt",
    "https://portal.amfiindia.com/spages/NAVAll.txt",
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/129.0.0.0 Safari/537.36"
)


@dataclass(slots=True, frozen=True)
class Settings:
    cache_dir: Path = CACHE_DIR
    equity_sources: tuple[str, ...] = EQUITY_SOURCES
    fund_sources: tuple[str, ...] = FUND_SOURCES
    request_timeout: float = 15.0
    default_currency: str = "INR"
    search_limit: int = 10
    min_query_length: int = 2
    fallback_retry_interval: timedelta = field(default=timedelta(minutes=15))
    user_agent: str = DEFAULT_USER_AGENT


def _coerce(name: str, value: Any) -> Any:
    if name == "cache_dir":
        return Path(value)
    if name in ("equity_sources", "fund_sources"):
        if isinstance(value, str):
            return (value,)
        return tuple(str(item) for item in value)
    if name == "fallback_retry_interval":
        return timedelta(seconds=float(value))
    if name == "request_timeout":
        return float(value)
    if name in ("search_limit", "min_query_length"):
        return int(value)
    return str(value)


def load_settings(path: Path | None = None) -> Settings:
    """Return defaults overlaid with the JSON override file, if one is readable."""
    override_path = path or OVERRIDE_PATH
    settings = Settings()
    if not override_path.exists():
        return settings
    try:
        data = json.loads(override_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as err:
        _LOGGER.warning("Ignoring unreadable settings override %s: %s", override_path, err)
        return settings
    if not isinstance(data, dict):
        return settings

    known = {f.name for f in fields(Settings)}
    overrides: dict[str, Any] = {}
    for key, value in data.items():
        if key not in known or value is None:
            _LOGGER.debug("Unknown settings override key %s", key)
            continue
        try:
            overrides[key] = _coerce(key, value)
        except (TypeError, ValueError) as err:
            _LOGGER.warning("Invalid value for %s in %s: %s", key, override_path, err)
    return replace(settings, **overrides)


SETTINGS = load_settings()
