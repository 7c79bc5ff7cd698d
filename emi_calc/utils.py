"""Utility functions for the EMI calculator.

This module provides helpers for turning user input into ``Decimal`` values,
rounding money to two places and converting tenures between years and
months. Amount parsing understands the shorthand people type into a loan
form (``"25l"``, ``"2.5m"``, ``"1,00,000"``).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

Number = Union[Decimal, int, float, str]

TWO_PLACES = Decimal("0.01")

TENURE_UNITS = ("months", "years")

# Longest suffix first so that "cr" is not read as a bare "r".
_AMOUNT_SUFFIXES = (
    ("cr", Decimal("10000000")),
    ("k", Decimal("1000")),
    ("m", Decimal("1000000")),
    ("l", Decimal("100000")),
)


def to_decimal(value: Number) -> Decimal:
    """Convert a number or numeric string into a finite ``Decimal``.

    Floats go through ``str()`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion. Commas are stripped from strings.

    Raises
    ------
    ValueError
        If the value is not numeric, is a bool, or is NaN/infinite.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        text = str(value).strip().replace(",", "")
        try:
            result = Decimal(text)
        except InvalidOperation as exc:
            raise ValueError(f"Invalid numeric value: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value!r}")
    return result


def round_money(value: Decimal) -> Decimal:
    """Round to two decimal places, halves away from zero."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def tenure_to_months(tenure: int, unit: str = "months") -> int:
    """Return the number of installments for a tenure given in months or years."""
    unit = str(unit).lower()
    if unit not in TENURE_UNITS:
        raise ValueError(f"Tenure unit must be 'months' or 'years'; got {unit}")
    return tenure * 12 if unit == "years" else tenure


def parse_amount(value: str) -> Decimal:
    """Parse a monetary amount with optional shorthand suffixes.

    Accepts plain numbers (``"500000"``), separators (``"5,00,000"``) and the
    suffixes ``k`` (thousand), ``m`` (million), ``l`` (lakh) and ``cr``
    (crore), e.g. ``"25l"`` for 2,500,000.
    """
    text = value.strip().lower().replace(",", "")
    factor = Decimal("1")
    for suffix, multiplier in _AMOUNT_SUFFIXES:
        if text.endswith(suffix):
            factor = multiplier
            text = text[: -len(suffix)].strip()
            break
    try:
        return to_decimal(text) * factor
    except ValueError as exc:
        raise ValueError(f"Invalid amount: {value}") from exc
