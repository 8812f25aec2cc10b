# src/models/offer_group.py

"""All offers for one (brand, model) pair within a run."""

from dataclasses import dataclass

from src.models.offer import Offer


@dataclass(frozen=True)
class OfferGroup:
    """Offers for one vehicle, cheapest first."""

    brand: str
    model: str
    offers: tuple[Offer, ...]

    @property
    def best(self) -> Offer:
        return self.offers[0]

    @property
    def lowest_price(self) -> int:
        return self.offers[0].price

    @property
    def cheapest_site(self) -> str:
        return self.offers[0].site
