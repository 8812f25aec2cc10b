# src/filters/value_parser.py

"""Locale-tolerant parsing of monthly price and duration text."""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_NON_NUMERIC_RE = re.compile(r"[^\d.,]")
_DURATION_RE = re.compile(r"(\d+)\s*(?:mes|month|mesi)", re.IGNORECASE)
_BARE_INT_RE = re.compile(r"\d+")


def parse_price(text: str | None) -> int | None:
    """Parse a price like '€ 1.234,50' or '1234.50 /mese' to an integer.

    The rightmost separator (comma or dot) is the decimal mark; any
    other separator is treated as thousands grouping. A lone dot
    grouping mark is therefore read as a decimal point: "€ 1.290"
    parses to 1, not 1290. Halves round up. Returns ``None`` unless
    the result is a positive number, including for digit runs too
    long to round.
    """
    if not text:
        return None
    cleaned = _NON_NUMERIC_RE.sub("", str(text))
    if not cleaned:
        return None

    decimal_idx = max(cleaned.rfind(","), cleaned.rfind("."))
    if decimal_idx == -1:
        number = cleaned
    else:
        integer_part = re.sub(r"[.,]", "", cleaned[:decimal_idx])
        fraction_part = cleaned[decimal_idx + 1:]
        number = f"{integer_part or '0'}.{fraction_part or '0'}"

    try:
        value = Decimal(number)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None

    try:
        rounded = int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # More integer digits than the context precision
        return None
    return rounded if rounded > 0 else None


def parse_duration(text: str | None) -> int | None:
    """Parse a contract length like '36 mesi' or '48 months' to months.

    Falls back to the first bare integer when no duration keyword
    is present.
    """
    if not text:
        return None
    text = str(text)
    match = _DURATION_RE.search(text)
    if match:
        return int(match.group(1))
    bare = _BARE_INT_RE.search(text)
    return int(bare.group(0)) if bare else None
