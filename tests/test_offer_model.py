# tests/test_offer_model.py

"""Tests for the offer data models."""

import dataclasses
import unittest
from datetime import datetime

from src.models.offer import Offer, RawOfferFields
from src.models.offer_group import OfferGroup
from src.models.snapshot import Snapshot


class TestRawOfferFields(unittest.TestCase):
    """Feed record → RawOfferFields."""

    def test_title_key(self) -> None:
        """A ``title`` key is used as-is."""
        raw = RawOfferFields.from_dict("ayvens", {
            "title": "Peugeot 208", "price": "€ 199,00",
            "duration": "36 mesi", "deposit": "€ 2.000",
        })
        self.assertEqual(raw.title, "Peugeot 208")
        self.assertEqual(raw.duration_text, "36 mesi")
        self.assertEqual(raw.deposit_text, "€ 2.000")

    def test_brand_and_model_keys(self) -> None:
        """Separate brand/model keys are joined into a title."""
        raw = RawOfferFields.from_dict(
            "leasys", {"brand": "Jeep", "model": "Avenger"},
        )
        self.assertEqual(raw.title, "Jeep Avenger")

    def test_missing_values_become_empty(self) -> None:
        """Absent and null values map to empty strings."""
        raw = RawOfferFields.from_dict("leasys", {"price": None})
        self.assertEqual(raw.price_text, "")
        self.assertEqual(raw.url, "")
        self.assertEqual(raw.title.strip(), "")

    def test_numbers_stringified(self) -> None:
        """Numeric feed values reach the parser as text."""
        raw = RawOfferFields.from_dict(
            "ayvens", {"title": "Fiat Panda", "price": 179.5, "duration": 48},
        )
        self.assertEqual(raw.price_text, "179.5")
        self.assertEqual(raw.duration_text, "48")

    def test_record_site_overrides(self) -> None:
        """A ``site`` inside the record wins over the adapter's id."""
        raw = RawOfferFields.from_dict("aggregator", {"site": "rentago"})
        self.assertEqual(raw.site, "rentago")

    def test_image_alias(self) -> None:
        """``image`` is accepted in place of ``image_url``."""
        raw = RawOfferFields.from_dict(
            "ayvens", {"image": "https://cdn.example.com/a.jpg"},
        )
        self.assertEqual(raw.image_url, "https://cdn.example.com/a.jpg")


class TestOffer(unittest.TestCase):
    """Offer, OfferGroup and Snapshot behaviour."""

    def _offer(self, site: str, price: int) -> Offer:
        return Offer(
            site=site, brand="FIAT", model="Panda",
            price=price, duration=48,
        )

    def test_key(self) -> None:
        """The grouping key is (brand, model)."""
        self.assertEqual(self._offer("ayvens", 179).key, ("FIAT", "Panda"))

    def test_frozen(self) -> None:
        """Offers are immutable."""
        offer = self._offer("ayvens", 179)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            offer.price = 150  # type: ignore[misc]

    def test_defaults(self) -> None:
        """Optional attributes default to empty."""
        offer = self._offer("ayvens", 179)
        self.assertIsNone(offer.down_payment)
        self.assertEqual(offer.fuel, "")
        self.assertIsInstance(offer.extracted_at, datetime)

    def test_group_best(self) -> None:
        """The first offer in a group is its best."""
        group = OfferGroup(
            brand="FIAT", model="Panda",
            offers=(self._offer("leasys", 169), self._offer("ayvens", 179)),
        )
        self.assertEqual(group.lowest_price, 169)
        self.assertEqual(group.cheapest_site, "leasys")
        self.assertIs(group.best, group.offers[0])

    def test_snapshot_count(self) -> None:
        """Snapshot.count is the number of offers."""
        snap = Snapshot(
            timestamp=datetime(2026, 3, 1),
            offers=(self._offer("ayvens", 179),),
        )
        self.assertEqual(snap.count, 1)


if __name__ == "__main__":
    unittest.main()
