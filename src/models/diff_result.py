# src/models/diff_result.py

"""Price movement of an offer relative to the previous snapshot."""

from dataclasses import dataclass
from enum import Enum

from src.models.offer import Offer


class PriceChange(str, Enum):
    """Diff classification against the previous run."""

    NEW = "new"
    SAME = "same"
    INCREASED = "increased"
    DECREASED = "decreased"


@dataclass(frozen=True)
class DiffResult:
    """Classification of one current offer.

    ``delta`` is always non-negative; the direction is carried by
    ``change``.
    """

    offer: Offer
    change: PriceChange
    delta: int = 0
    previous_price: int | None = None
