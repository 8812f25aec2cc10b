# src/filters/offer_validator.py

"""Offer validation: price/duration ranges and brand/model screens."""

import logging

from src.config.filter_config import FilterConfig
from src.models.offer import Offer

logger = logging.getLogger("lease_digest.filters")


class OfferValidator:
    """Apply a FilterConfig to normalized offers."""

    @staticmethod
    def _passes_model_screen(
        offer: Offer, config: FilterConfig,
    ) -> tuple[bool, bool]:
        """Return (brand_ok, model_ok) for the active screening mode.

        A non-empty inclusion list replaces the exclusion lists
        entirely; the two are never combined.
        """
        model = offer.model.upper()
        if config.included_models:
            return True, any(
                model.startswith(m) for m in config.included_models
            )
        brand_ok = offer.brand.upper() not in config.excluded_brands
        model_ok = not any(
            model.startswith(m) for m in config.excluded_models
        )
        return brand_ok, model_ok

    @staticmethod
    def is_valid(offer: Offer, config: FilterConfig) -> bool:
        """Check one offer against the price, duration and model rules."""
        price_ok = config.min_price <= offer.price <= config.max_price
        duration_ok = offer.duration >= config.min_duration_months
        brand_ok, model_ok = OfferValidator._passes_model_screen(
            offer, config
        )
        valid = price_ok and duration_ok and brand_ok and model_ok

        if not valid:
            logger.debug(
                "Offer rejected: %s %s (site=%s, price=%d, duration=%d) "
                "price_ok=%s duration_ok=%s brand_ok=%s model_ok=%s",
                offer.brand,
                offer.model,
                offer.site,
                offer.price,
                offer.duration,
                price_ok,
                duration_ok,
                brand_ok,
                model_ok,
            )
        return valid

    @staticmethod
    def validate(
        offers: list[Offer], config: FilterConfig,
    ) -> tuple[list[Offer], int]:
        """Keep offers satisfying *config*.

        Returns the valid offers and the count of dropped items.
        """
        valid = [o for o in offers if OfferValidator.is_valid(o, config)]
        dropped = len(offers) - len(valid)

        if dropped:
            logger.info(
                "Validation dropped %d of %d offers",
                dropped,
                len(offers),
            )

        return valid, dropped
