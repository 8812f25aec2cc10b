# tests/test_offer_validator.py

"""Tests for OfferValidator."""

import itertools
import unittest

from src.config.filter_config import FilterConfig
from src.filters.offer_validator import OfferValidator
from src.models.offer import Offer


def _o(
    brand: str = "FIAT",
    model: str = "Panda Hybrid",
    price: int = 200,
    duration: int = 48,
) -> Offer:
    """Create a minimal Offer."""
    return Offer(
        site="test", brand=brand, model=model,
        price=price, duration=duration,
    )


def _cfg(**kwargs: object) -> FilterConfig:
    """FilterConfig with the default 100-350 €, 48-month range."""
    params: dict[str, object] = {
        "min_price": 100,
        "max_price": 350,
        "min_duration_months": 48,
    }
    params.update(kwargs)
    return FilterConfig(**params)  # type: ignore[arg-type]


class TestPriceAndDuration(unittest.TestCase):
    """Range rules."""

    def test_price_below_min_rejected(self) -> None:
        """An offer at 99 fails when min is 100."""
        self.assertFalse(OfferValidator.is_valid(_o(price=99), _cfg()))

    def test_price_bounds_inclusive(self) -> None:
        """Both ends of the price range are accepted."""
        self.assertTrue(OfferValidator.is_valid(_o(price=100), _cfg()))
        self.assertTrue(OfferValidator.is_valid(_o(price=350), _cfg()))

    def test_price_above_max_rejected(self) -> None:
        """An offer at 351 fails when max is 350."""
        self.assertFalse(OfferValidator.is_valid(_o(price=351), _cfg()))

    def test_short_duration_rejected(self) -> None:
        """A 36-month offer fails when at least 48 are required."""
        self.assertFalse(
            OfferValidator.is_valid(_o(duration=36), _cfg())
        )

    def test_longer_duration_accepted(self) -> None:
        """A 60-month offer passes a 48-month minimum."""
        self.assertTrue(
            OfferValidator.is_valid(_o(duration=60), _cfg())
        )


class TestExclusionMode(unittest.TestCase):
    """Brand/model screen when no inclusion list is set."""

    def test_excluded_brand_rejected(self) -> None:
        """A brand in the exclusion set fails."""
        cfg = _cfg(excluded_brands=frozenset({"fiat"}))
        self.assertFalse(OfferValidator.is_valid(_o(), cfg))

    def test_excluded_model_prefix_rejected(self) -> None:
        """A model starting with an excluded entry fails."""
        cfg = _cfg(excluded_models=frozenset({"panda"}))
        self.assertFalse(OfferValidator.is_valid(_o(), cfg))

    def test_excluded_model_needs_prefix_match(self) -> None:
        """An excluded entry in the middle of the model does not match."""
        cfg = _cfg(excluded_models=frozenset({"HYBRID"}))
        self.assertTrue(OfferValidator.is_valid(_o(), cfg))

    def test_other_brand_passes(self) -> None:
        """Brands outside the exclusion set pass."""
        cfg = _cfg(excluded_brands=frozenset({"BMW"}))
        self.assertTrue(OfferValidator.is_valid(_o(), cfg))


class TestInclusionMode(unittest.TestCase):
    """Brand/model screen when an inclusion list is set."""

    def test_included_prefix_passes(self) -> None:
        """A model starting with an included entry passes."""
        cfg = _cfg(included_models=frozenset({"panda"}))
        self.assertTrue(OfferValidator.is_valid(_o(), cfg))

    def test_not_included_rejected(self) -> None:
        """A model matching no included entry fails."""
        cfg = _cfg(included_models=frozenset({"500"}))
        self.assertFalse(OfferValidator.is_valid(_o(), cfg))

    def test_inclusion_still_requires_price_range(self) -> None:
        """Inclusion does not bypass the price rule."""
        cfg = _cfg(included_models=frozenset({"PANDA"}))
        self.assertFalse(OfferValidator.is_valid(_o(price=400), cfg))

    def test_exclusions_have_no_effect(self) -> None:
        """With inclusions set, exclusion sets never change the outcome."""
        offers = [
            _o(),
            _o(model="500e"),
            _o(brand="BMW", model="X1"),
            _o(brand="BMW", model="Panda"),
            _o(price=50),
            _o(duration=24),
        ]
        exclusion_choices = [
            frozenset(),
            frozenset({"FIAT"}),
            frozenset({"FIAT", "BMW"}),
        ]
        model_choices = [
            frozenset(),
            frozenset({"PANDA"}),
            frozenset({"X1", "500"}),
        ]
        included = frozenset({"PANDA", "X1"})
        baseline = _cfg(included_models=included)
        for brands, models in itertools.product(
            exclusion_choices, model_choices
        ):
            cfg = _cfg(
                included_models=included,
                excluded_brands=brands,
                excluded_models=models,
            )
            for offer in offers:
                with self.subTest(brands=brands, models=models, offer=offer):
                    self.assertEqual(
                        OfferValidator.is_valid(offer, cfg),
                        OfferValidator.is_valid(offer, baseline),
                    )


class TestValidateBatch(unittest.TestCase):
    """OfferValidator.validate batch tests."""

    def test_empty_list(self) -> None:
        """Empty input returns an empty list and zero dropped."""
        self.assertEqual(OfferValidator.validate([], _cfg()), ([], 0))

    def test_mixed_batch(self) -> None:
        """Invalid offers are dropped and counted."""
        offers = [_o(), _o(price=99), _o(duration=12), _o(price=300)]
        valid, dropped = OfferValidator.validate(offers, _cfg())
        self.assertEqual([o.price for o in valid], [200, 300])
        self.assertEqual(dropped, 2)


if __name__ == "__main__":
    unittest.main()
