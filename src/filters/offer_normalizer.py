# src/filters/offer_normalizer.py

"""Raw adapter fields → canonical Offer records."""

import logging
from dataclasses import dataclass
from datetime import datetime

from src.filters.value_parser import parse_duration, parse_price
from src.models.offer import Offer, RawOfferFields

logger = logging.getLogger("lease_digest.normalizer")

# Applied when the listing carries no duration signal at all
DEFAULT_DURATION_MONTHS = 48


@dataclass(frozen=True)
class Rejected:
    """A raw record that could not be turned into an Offer."""

    site: str
    reason: str
    title: str = ""


class OfferNormalizer:
    """Build canonical offers from raw per-site fields."""

    @staticmethod
    def normalize(
        raw: RawOfferFields,
        extracted_at: datetime | None = None,
    ) -> Offer | Rejected:
        """Normalize one raw record.

        Brand is the first token of the title, upper-cased; the
        rest of the title plus the subtitle forms the model.
        Returns :class:`Rejected` when the brand or price is missing.
        """
        tokens = raw.title.split()
        brand = tokens[0].upper() if tokens else ""
        if not brand:
            return Rejected(raw.site, "missing brand", raw.title)

        price = parse_price(raw.price_text)
        if price is None:
            return Rejected(
                raw.site,
                f"unparseable price {raw.price_text!r}",
                raw.title,
            )

        model = " ".join([*tokens[1:], *raw.subtitle.split()])
        duration = parse_duration(raw.duration_text)
        down_payment = (
            parse_price(raw.deposit_text) if raw.deposit_text else None
        )

        return Offer(
            site=raw.site,
            brand=brand,
            model=model,
            price=price,
            duration=(
                duration if duration is not None
                else DEFAULT_DURATION_MONTHS
            ),
            down_payment=down_payment,
            fuel=" ".join(raw.fuel.split()),
            gear=" ".join(raw.gear.split()),
            url=raw.url.strip(),
            image_url=raw.image_url.strip(),
            extracted_at=extracted_at or datetime.now(),
        )

    @staticmethod
    def normalize_all(
        raws: list[RawOfferFields],
        extracted_at: datetime | None = None,
    ) -> tuple[list[Offer], list[Rejected]]:
        """Normalize a batch, logging every rejection.

        Returns the offers and the rejected records.
        """
        offers: list[Offer] = []
        rejected: list[Rejected] = []

        for raw in raws:
            result = OfferNormalizer.normalize(raw, extracted_at)
            if isinstance(result, Rejected):
                logger.debug(
                    "Rejected raw offer (site=%s, title=%r): %s",
                    result.site,
                    result.title,
                    result.reason,
                )
                rejected.append(result)
            else:
                offers.append(result)

        if rejected:
            logger.info(
                "Normalization rejected %d of %d raw offers",
                len(rejected),
                len(raws),
            )

        return offers, rejected
