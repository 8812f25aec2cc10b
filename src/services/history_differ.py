# src/services/history_differ.py

"""Classify current offers against the previous run's snapshot."""

import logging
from collections import Counter

from src.models.diff_result import DiffResult, PriceChange
from src.models.offer import Offer

logger = logging.getLogger("lease_digest.history")


def _match_key(offer: Offer) -> tuple[str, str]:
    """Case- and whitespace-insensitive (brand, model) key."""
    return (
        " ".join(offer.brand.split()).upper(),
        " ".join(offer.model.split()).upper(),
    )


class HistoryDiffer:
    """Compare offers between two runs by (brand, model)."""

    @staticmethod
    def diff(
        current: list[Offer],
        previous: list[Offer] | tuple[Offer, ...],
    ) -> list[DiffResult]:
        """Return one DiffResult per current offer, in input order.

        The previous snapshot is indexed once; when it holds several
        offers for a key, the last one wins.
        """
        index: dict[tuple[str, str], Offer] = {
            _match_key(o): o for o in previous
        }

        results: list[DiffResult] = []
        for offer in current:
            old = index.get(_match_key(offer))
            if old is None:
                results.append(DiffResult(offer, PriceChange.NEW))
            elif offer.price == old.price:
                results.append(
                    DiffResult(offer, PriceChange.SAME, 0, old.price)
                )
            elif offer.price > old.price:
                results.append(DiffResult(
                    offer,
                    PriceChange.INCREASED,
                    offer.price - old.price,
                    old.price,
                ))
            else:
                results.append(DiffResult(
                    offer,
                    PriceChange.DECREASED,
                    old.price - offer.price,
                    old.price,
                ))

        counts = HistoryDiffer.summarize(results)
        logger.info(
            "Diff complete: %d new, %d increased, %d decreased, %d same",
            counts[PriceChange.NEW],
            counts[PriceChange.INCREASED],
            counts[PriceChange.DECREASED],
            counts[PriceChange.SAME],
        )
        return results

    @staticmethod
    def summarize(results: list[DiffResult]) -> Counter[PriceChange]:
        """Count results per classification."""
        return Counter(r.change for r in results)
