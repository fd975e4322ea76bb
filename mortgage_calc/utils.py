"""Utility functions for the mortgage calculator.

This module provides helpers for converting user input into ``Decimal``
values and for rounding computed values for display: money to whole currency
units and ratios to two decimal places.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

WHOLE_UNIT = Decimal("1")
HUNDREDTH = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Convert a JSON number or numeric string into a finite ``Decimal``.

    Integers and floats are accepted as they are (floats through their
    shortest ``repr`` so ``8.5`` stays ``8.5``). Strings may contain
    thousands separators. Booleans, ``NaN`` and infinities are rejected.

    Raises
    ------
    ValueError
        If the value cannot be read as a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        cleaned = value.replace(",", "").strip()
        try:
            result = Decimal(cleaned)
        except InvalidOperation as exc:
            raise ValueError(f"Invalid numeric value: {value!r}") from exc
    else:
        raise ValueError(f"Invalid numeric value: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value!r}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse an amount with optional ``k``/``m`` suffixes.

    Accepts plain numbers ("4000000"), thousands separators ("4,000,000")
    and shorthand ("500k" meaning 500_000, "4m" meaning 4_000_000).
    """
    text = value.strip().lower().replace(",", "")
    factor = Decimal(1)
    if text.endswith("k"):
        factor = Decimal(1_000)
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal(1_000_000)
        text = text[:-1]
    return to_decimal(text) * factor


def round_currency(value: Decimal) -> int:
    """Round a monetary value half-up to a whole currency unit."""
    return int(value.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP))


def round_ratio(value: Decimal) -> Decimal:
    """Round a percentage half-up to two decimal places."""
    return value.quantize(HUNDREDTH, rounding=ROUND_HALF_UP)


def json_number(value: Decimal):
    """Return ``value`` as an ``int`` when it is integral, else as a ``float``."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)
