import json
from datetime import timedelta
from pathlib import Path

from market_cache.config import FUND_SOURCES, Settings, load_settings


def test_missing_override_gives_defaults(tmp_path: Path):
    settings = load_settings(tmp_path / "absent.json")

    assert settings == Settings()
    assert settings.fund_sources == FUND_SOURCES
    assert settings.search_limit == 10


def test_override_values_are_coerced(tmp_path: Path):
    path = tmp_path / "settings_override.json"
    path.write_text(
        json.dumps(
            {
                "cache_dir": str(tmp_path / "cache"),
                "equity_sources": "https://example.test/prices.csv",
                "fund_sources": ["https://a/nav.txt", "https://b/nav.txt"],
                "request_timeout": "4",
                "fallback_retry_interval": 60,
                "unknown_key": True,
            }
        ),
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.cache_dir == tmp_path / "cache"
    assert settings.equity_sources == ("https://example.test/prices.csv",)
    assert settings.fund_sources == ("https://a/nav.txt", "https://b/nav.txt")
    assert settings.request_timeout == 4.0
    assert settings.fallback_retry_interval == timedelta(seconds=60)


def test_unreadable_override_is_ignored(tmp_path: Path):
    path = tmp_path / "settings_override.json"
    path.write_text("{broken", encoding="utf-8")

    assert load_settings(path) == Settings()
