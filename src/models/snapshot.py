# src/models/snapshot.py

"""Per-run offer snapshot used as the next run's comparison baseline."""

from dataclasses import dataclass
from datetime import datetime

from src.models.offer import Offer


@dataclass(frozen=True)
class Snapshot:
    """Immutable set of validated offers from one completed run."""

    timestamp: datetime
    offers: tuple[Offer, ...]

    @property
    def count(self) -> int:
        return len(self.offers)
