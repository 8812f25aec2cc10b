# src/config/settings.py

"""Central configuration for the lease_digest pipeline."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Read an integer env var, falling back on missing/invalid values."""
    raw = os.getenv(name, "").strip()
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str) -> list[str]:
    """Read a comma-separated env var as a trimmed, upper-cased list."""
    raw = os.getenv(name, "")
    return [
        item.strip().upper()
        for item in raw.split(",")
        if item.strip()
    ]


def _feed_source(
    site_id: str, label: str, base_url: str = "",
) -> dict[str, str]:
    """Registry entry for a site's JSON feed.

    Reads ``<FEEDS_DIR>/<id>.json`` by default, or GETs
    ``<base_url>/<id>.json`` when *base_url* is set.
    """
    if base_url:
        return {
            "id": site_id,
            "label": label,
            "adapter": "src.adapters.http_feed_adapter.HttpFeedAdapter",
            "location": f"{base_url.rstrip('/')}/{site_id}.json",
        }
    return {
        "id": site_id,
        "label": label,
        "adapter": "src.adapters.feed_file_adapter.FeedFileAdapter",
        "location": f"{site_id}.json",
    }


class Settings:
    """Central configuration for the lease_digest pipeline."""

    # --- Filtering (environment) ---
    MIN_PRICE: int = _env_int("MIN_PRICE", 100)
    MAX_PRICE: int = _env_int("MAX_PRICE", 350)
    MIN_DURATION_MONTHS: int = _env_int("MIN_DURATION_MONTHS", 48)
    EXCLUDED_BRANDS: list[str] = _env_list("EXCLUDED_BRANDS")
    EXCLUDED_MODELS: list[str] = _env_list("EXCLUDED_MODELS")
    INCLUDED_MODELS: list[str] = _env_list("INCLUDED_MODELS")

    # --- Pipeline ---
    MAX_CONCURRENT_ADAPTERS: int = 1    # 1 = sequential crawl
    ADAPTER_TIMEOUT: float = 300.0      # Seconds per fetch; the thread is abandoned, not killed

    # --- HTTP feeds ---
    REQUEST_DELAY: float = 2.0          # Base delay between retries
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Retry count on transient failures
    MAX_DELAY_MULTIPLIER: int = 8       # Cap for adaptive backoff
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Accept-Language": "it-IT,it;q=0.9,en;q=0.8",
    }

    # --- Retention ---
    HISTORY_RETENTION_DAYS: int = 30
    LOG_RETENTION_DAYS: int = 7

    # --- Logging ---
    CONSOLE_LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING").upper()

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = Path(
        os.getenv("LEASE_DATA_DIR", str(BASE_DIR / "data"))
    )
    FEEDS_DIR: Path = Path(
        os.getenv("LEASE_FEEDS_DIR", str(BASE_DIR / "feeds"))
    )
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Sources (adapter registry) ---
    # Set LEASE_FEEDS_URL to fetch <url>/<id>.json over HTTP instead
    FEEDS_URL: str = os.getenv("LEASE_FEEDS_URL", "").strip()
    AVAILABLE_SOURCES: list[dict[str, str]] = [
        _feed_source("ayvens", "Ayvens", FEEDS_URL),
        _feed_source("alphabet", "Alphabet", FEEDS_URL),
        _feed_source("leasys", "Leasys", FEEDS_URL),
        _feed_source("rentago", "Rentago", FEEDS_URL),
        _feed_source("driveflee", "Driveflee", FEEDS_URL),
        _feed_source("yoyomove", "YoYoMove", FEEDS_URL),
    ]
