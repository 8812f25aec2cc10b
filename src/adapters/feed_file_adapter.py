# src/adapters/feed_file_adapter.py

"""Adapter reading raw offers from a JSON feed file on disk."""

import json
import logging
from pathlib import Path

from src.adapters.site_adapter import AdapterError, records_from_payload
from src.config.settings import Settings
from src.models.offer import RawOfferFields


class FeedFileAdapter:
    """Reads ``<FEEDS_DIR>/<location>`` exported by an external scraper."""

    def __init__(self, site: str, location: str) -> None:
        self.site = site
        path = Path(location)
        self.path: Path = (
            path if path.is_absolute() else Settings.FEEDS_DIR / path
        )
        self.logger = logging.getLogger(f"lease_digest.{site}")

    def fetch(self) -> list[RawOfferFields]:
        """Load and decode the feed file."""
        try:
            with open(self.path, encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            msg = f"[{self.site}] cannot read feed {self.path}: {exc}"
            raise AdapterError(msg) from exc

        records = records_from_payload(self.site, payload)
        self.logger.info(
            "[%s] Read %d raw offers from %s",
            self.site,
            len(records),
            self.path,
        )
        return records
