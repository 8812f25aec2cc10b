# src/filters/aggregator.py

"""Group offers per vehicle and pick the cheapest across sites."""

import logging

from src.models.offer import Offer
from src.models.offer_group import OfferGroup

logger = logging.getLogger("lease_digest.filters")


class OfferAggregator:
    """Group validated offers by (brand, model)."""

    @staticmethod
    def group(
        offers: list[Offer],
    ) -> dict[tuple[str, str], list[Offer]]:
        """Map each (brand, model) to its offers, cheapest first.

        Keys keep first-seen order and equal prices keep scan order
        (``sorted`` is stable). No filtering happens here.
        """
        buckets: dict[tuple[str, str], list[Offer]] = {}
        for offer in offers:
            buckets.setdefault(offer.key, []).append(offer)

        return {
            key: sorted(bucket, key=lambda o: o.price)
            for key, bucket in buckets.items()
        }

    @staticmethod
    def build_groups(
        offers: list[Offer],
    ) -> dict[tuple[str, str], OfferGroup]:
        """Group offers and wrap each bucket in an :class:`OfferGroup`."""
        groups = {
            key: OfferGroup(brand=key[0], model=key[1], offers=tuple(items))
            for key, items in OfferAggregator.group(offers).items()
        }
        logger.info(
            "Aggregated %d offers into %d vehicle groups",
            len(offers),
            len(groups),
        )
        return groups
