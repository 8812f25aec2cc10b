# src/storage/snapshot_store.py

"""Atomic JSON persistence of the latest offer snapshot."""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.models.offer import Offer
from src.models.snapshot import Snapshot

logger = logging.getLogger("lease_digest.storage")

SNAPSHOT_FILENAME = "offers.json"


class SnapshotError(Exception):
    """The stored snapshot could not be read."""


class PersistenceError(SnapshotError):
    """A new snapshot could not be written."""


def offer_to_dict(offer: Offer) -> dict[str, Any]:
    """Serialise an Offer to JSON-safe primitives."""
    return {
        "site": offer.site,
        "brand": offer.brand,
        "model": offer.model,
        "price": offer.price,
        "duration": offer.duration,
        "down_payment": offer.down_payment,
        "fuel": offer.fuel,
        "gear": offer.gear,
        "url": offer.url,
        "image_url": offer.image_url,
        "extracted_at": offer.extracted_at.isoformat(),
    }


def offer_from_dict(data: dict[str, Any]) -> Offer:
    """Rebuild an Offer written by :func:`offer_to_dict`."""
    down_payment = data.get("down_payment")
    return Offer(
        site=str(data["site"]),
        brand=str(data["brand"]),
        model=str(data["model"]),
        price=int(data["price"]),
        duration=int(data["duration"]),
        down_payment=(
            int(down_payment) if down_payment is not None else None
        ),
        fuel=str(data.get("fuel", "")),
        gear=str(data.get("gear", "")),
        url=str(data.get("url", "")),
        image_url=str(data.get("image_url", "")),
        extracted_at=datetime.fromisoformat(str(data["extracted_at"])),
    )


class SnapshotStore:
    """Reads and atomically replaces ``offers.json`` in the data dir."""

    def __init__(self, data_dir: Path | None = None) -> None:
        self.data_dir: Path = data_dir or Settings.DATA_DIR
        self.path: Path = self.data_dir / SNAPSHOT_FILENAME
        logger.debug("SnapshotStore initialised — path=%s", self.path)

    def load_latest(self) -> Snapshot | None:
        """Return the last persisted snapshot, or ``None`` if none exists.

        Raises :class:`SnapshotError` when the file is unreadable.
        """
        if not self.path.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            offers = tuple(offer_from_dict(o) for o in data["offers"])
            timestamp = datetime.fromisoformat(data["timestamp"])
        except (OSError, json.JSONDecodeError) as exc:
            msg = f"Cannot read snapshot {self.path}: {exc}"
            raise SnapshotError(msg) from exc
        except (KeyError, TypeError, ValueError) as exc:
            msg = f"Malformed snapshot {self.path}: {exc!r}"
            raise SnapshotError(msg) from exc

        logger.debug(
            "Loaded snapshot from %s (%d offers)",
            timestamp.isoformat(),
            len(offers),
        )
        return Snapshot(timestamp=timestamp, offers=offers)

    def save(self, snapshot: Snapshot) -> Path:
        """Write *snapshot*, replacing the previous one atomically.

        The blob goes to a temporary file in the same directory
        first, so a failed write never clobbers the last good
        snapshot. Raises :class:`PersistenceError` on any failure.
        """
        payload = {
            "timestamp": snapshot.timestamp.isoformat(),
            "count": snapshot.count,
            "offers": [offer_to_dict(o) for o in snapshot.offers],
        }
        tmp_name: str | None = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.data_dir,
                prefix=".offers-",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(payload, tmp, ensure_ascii=False, indent=2)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            msg = f"Cannot write snapshot {self.path}: {exc}"
            raise PersistenceError(msg) from exc

        logger.info(
            "Saved snapshot with %d offers to %s",
            snapshot.count,
            self.path,
        )
        return self.path
