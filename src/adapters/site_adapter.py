# src/adapters/site_adapter.py

"""Site adapter contract and registry loading."""

import importlib
import logging
from typing import Any, Protocol, cast, runtime_checkable

from src.models.offer import RawOfferFields

logger = logging.getLogger("lease_digest.adapters")


class AdapterError(Exception):
    """A site adapter could not produce its raw offers."""


@runtime_checkable
class SiteAdapter(Protocol):
    """Anything that yields raw offer fields for one site."""

    site: str

    def fetch(self) -> list[RawOfferFields]:
        """Return the raw offers currently listed on the site."""
        ...


def records_from_payload(
    site: str, payload: Any,
) -> list[RawOfferFields]:
    """Convert a decoded JSON feed into raw offer fields.

    Accepts a bare list of records or an object with an ``offers``
    list. Non-object records are skipped. Raises :class:`AdapterError`
    for any other shape.
    """
    if isinstance(payload, dict) and "offers" in payload:
        payload = cast(dict[str, Any], payload)["offers"]
    if not isinstance(payload, list):
        msg = f"[{site}] feed is not a list of offers"
        raise AdapterError(msg)

    items = cast(list[object], payload)
    records = [
        RawOfferFields.from_dict(site, cast(dict[str, Any], item))
        for item in items
        if isinstance(item, dict)
    ]
    skipped = len(items) - len(records)
    if skipped:
        logger.warning(
            "[%s] Skipped %d non-object feed records", site, skipped,
        )
    return records


def _load_adapter_class(dotted_path: str) -> type[Any]:
    """Dynamically import an adapter class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


def build_adapters(
    sources: list[dict[str, str]],
) -> list[SiteAdapter]:
    """Instantiate the adapter of every registry entry, in order."""
    adapters: list[SiteAdapter] = []
    for src in sources:
        cls = _load_adapter_class(src["adapter"])
        adapters.append(cls(site=src["id"], location=src["location"]))
    return adapters
