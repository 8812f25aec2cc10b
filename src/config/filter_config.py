# src/config/filter_config.py

"""Explicit price/duration/brand rule set passed into each run."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from src.config.settings import Settings


def _upper_set(values: Iterable[str]) -> frozenset[str]:
    """Trim and upper-case a collection of names, dropping blanks."""
    return frozenset(
        v.strip().upper() for v in values if v and v.strip()
    )


@dataclass(frozen=True)
class FilterConfig:
    """Inclusion/exclusion and range rules for offer validation.

    Brand and model names are upper-cased on construction so that
    matching is case-insensitive. Raises ``ValueError`` when the
    ranges are inconsistent.
    """

    min_price: int
    max_price: int
    min_duration_months: int
    excluded_brands: frozenset[str] = field(default_factory=frozenset)
    excluded_models: frozenset[str] = field(default_factory=frozenset)
    included_models: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.min_price <= 0 or self.max_price <= 0:
            msg = "min_price and max_price must be positive"
            raise ValueError(msg)
        if self.min_price >= self.max_price:
            msg = (
                f"min_price ({self.min_price}) must be lower than "
                f"max_price ({self.max_price})"
            )
            raise ValueError(msg)
        if self.min_duration_months < 1:
            msg = "min_duration_months must be >= 1"
            raise ValueError(msg)
        # Frozen: normalise through object.__setattr__
        for name in (
            "excluded_brands", "excluded_models", "included_models",
        ):
            object.__setattr__(
                self, name, _upper_set(getattr(self, name)),
            )

    @classmethod
    def from_settings(cls) -> "FilterConfig":
        """Build a FilterConfig from the environment-derived Settings."""
        return cls(
            min_price=Settings.MIN_PRICE,
            max_price=Settings.MAX_PRICE,
            min_duration_months=Settings.MIN_DURATION_MONTHS,
            excluded_brands=frozenset(Settings.EXCLUDED_BRANDS),
            excluded_models=frozenset(Settings.EXCLUDED_MODELS),
            included_models=frozenset(Settings.INCLUDED_MODELS),
        )
