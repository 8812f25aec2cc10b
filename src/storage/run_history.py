# src/storage/run_history.py

"""Per-run history log and cumulative per-site statistics."""

import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, cast

from src.config.settings import Settings
from src.models.snapshot import Snapshot

logger = logging.getLogger("lease_digest.storage")

HISTORY_FILENAME = "history.json"
STATS_FILENAME = "stats.json"


def _empty_stats() -> dict[str, Any]:
    return {
        "total_runs": 0,
        "last_run": None,
        "total_offers_found": 0,
        "site_stats": {},
    }


class RunHistory:
    """JSON-backed run log (``history.json``) and stats (``stats.json``)."""

    def __init__(
        self,
        data_dir: Path | None = None,
        retention_days: int | None = None,
    ) -> None:
        self.data_dir: Path = data_dir or Settings.DATA_DIR
        self.history_path = self.data_dir / HISTORY_FILENAME
        self.stats_path = self.data_dir / STATS_FILENAME
        self.retention_days = (
            retention_days
            if retention_days is not None
            else Settings.HISTORY_RETENTION_DAYS
        )

    # ── File helpers ─────────────────────────────────────

    def _read_json(self, path: Path, default: Any) -> Any:
        """Load a JSON file, returning *default* if it is absent."""
        if not path.exists():
            return default
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def _write_json(self, path: Path, data: Any) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def _load_entries(self) -> list[dict[str, Any]]:
        data = self._read_json(self.history_path, [])
        if not isinstance(data, list):
            return []
        items = cast(list[object], data)
        return [e for e in items if isinstance(e, dict)]

    @staticmethod
    def _newer_than(
        entries: list[dict[str, Any]], cutoff: datetime,
    ) -> list[dict[str, Any]]:
        """Keep entries whose timestamp is after *cutoff*."""
        kept: list[dict[str, Any]] = []
        for entry in entries:
            try:
                ts = datetime.fromisoformat(str(entry["timestamp"]))
            except (KeyError, ValueError):
                logger.debug("Dropping history entry without timestamp")
                continue
            if ts > cutoff:
                kept.append(entry)
        return kept

    # ── Recording ────────────────────────────────────────

    def record_run(
        self,
        snapshot: Snapshot,
        site_counts: dict[str, int],
    ) -> None:
        """Append a run entry to the history and fold it into the stats.

        Raises ``OSError`` / ``ValueError`` if either file cannot be
        read or written.
        """
        entry = {
            "timestamp": snapshot.timestamp.isoformat(),
            "offer_count": snapshot.count,
            "site_breakdown": dict(site_counts),
        }
        entries = self._load_entries()
        entries.append(entry)
        cutoff = datetime.now() - timedelta(days=self.retention_days)
        self._write_json(
            self.history_path, self._newer_than(entries, cutoff),
        )

        stats = self.get_stats() or _empty_stats()
        stats["total_runs"] += 1
        stats["last_run"] = snapshot.timestamp.isoformat()
        stats["total_offers_found"] += snapshot.count

        site_stats: dict[str, dict[str, int]] = stats["site_stats"]
        for site, count in site_counts.items():
            site_entry = site_stats.setdefault(
                site,
                {"total_offers": 0, "runs": 0, "average_offers": 0},
            )
            site_entry["total_offers"] += count
            site_entry["runs"] += 1
            # Half-up, matching the price rounding rule
            site_entry["average_offers"] = int(
                site_entry["total_offers"] / site_entry["runs"] + 0.5
            )

        self._write_json(self.stats_path, stats)
        logger.info(
            "Recorded run %s (%d offers) — %d runs total",
            entry["timestamp"],
            snapshot.count,
            stats["total_runs"],
        )

    # ── Querying ─────────────────────────────────────────

    def get_history(self, days: int = 7) -> list[dict[str, Any]]:
        """Return run entries from the last *days* days, oldest first."""
        cutoff = datetime.now() - timedelta(days=days)
        return self._newer_than(self._load_entries(), cutoff)

    def get_stats(self) -> dict[str, Any] | None:
        """Return the cumulative statistics, or ``None`` before any run."""
        data = self._read_json(self.stats_path, None)
        return data if isinstance(data, dict) else None

    # ── Retention ────────────────────────────────────────

    def prune(self, days: int | None = None) -> int:
        """Drop history entries older than *days*. Returns the count removed."""
        max_age = days if days is not None else self.retention_days
        entries = self._load_entries()
        cutoff = datetime.now() - timedelta(days=max_age)
        kept = self._newer_than(entries, cutoff)
        removed = len(entries) - len(kept)
        if removed:
            self._write_json(self.history_path, kept)
            logger.info(
                "Pruned %d history entries older than %d days",
                removed,
                max_age,
            )
        return removed
