# src/models/offer.py

"""Offer data models for the normalization pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class RawOfferFields:
    """Unparsed fields for one listing, as extracted by a site adapter."""

    site: str
    title: str
    price_text: str
    duration_text: str = ""
    subtitle: str = ""
    deposit_text: str = ""
    fuel: str = ""
    gear: str = ""
    url: str = ""
    image_url: str = ""

    @classmethod
    def from_dict(
        cls, site: str, data: dict[str, Any],
    ) -> "RawOfferFields":
        """Build raw fields from a feed record.

        Accepts either a ``title`` key or separate ``brand`` and
        ``model`` keys. Numeric values are stringified so the
        value parser sees them like any scraped text.
        """
        title = str(data.get("title") or "")
        if not title:
            title = " ".join(
                str(data.get(k) or "") for k in ("brand", "model")
            )
        return cls(
            site=str(data.get("site") or site),
            title=title,
            price_text=_text(data.get("price")),
            duration_text=_text(data.get("duration")),
            subtitle=_text(data.get("subtitle")),
            deposit_text=_text(data.get("deposit")),
            fuel=_text(data.get("fuel")),
            gear=_text(data.get("gear")),
            url=_text(data.get("url")),
            image_url=_text(data.get("image_url") or data.get("image")),
        )


def _text(value: Any) -> str:
    """Stringify a feed value, mapping ``None`` to an empty string."""
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Offer:
    """A canonical lease offer (monthly price, contract length)."""

    site: str
    brand: str
    model: str
    price: int
    duration: int
    down_payment: int | None = None
    fuel: str = ""
    gear: str = ""
    url: str = ""
    image_url: str = ""
    extracted_at: datetime = field(default_factory=datetime.now)

    @property
    def key(self) -> tuple[str, str]:
        """Grouping key: (brand, model)."""
        return self.brand, self.model
