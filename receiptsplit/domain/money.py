"""Pure money and percentage helpers."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")

MoneyLike = Decimal | int | float | str


def to_decimal(value: MoneyLike | None, default: Decimal = ZERO) -> Decimal:
    """Coerce a number-ish value to Decimal; None maps to ``default``.

    Floats go through ``str`` so 20.99 stays 20.99 instead of its binary
    approximation.
    """
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError(f"Expected a number, got bool: {value!r}")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Not a valid amount: {value!r}") from exc


def round_money(amount: Decimal) -> Decimal:
    """Round to cents, half-up. For display and export only."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: MoneyLike, currency: str = "CAD") -> str:
    """Format an amount the way en-CA displays dollars: ``$1,234.50``."""
    value = round_money(to_decimal(amount))
    sign = "-" if value < 0 else ""
    body = f"{abs(value):,.2f}"
    if currency.upper() in ("CAD", "USD", "AUD", "NZD"):
        return f"{sign}${body}"
    return f"{sign}{currency.upper()} {body}"


def parse_currency(text: str) -> Decimal:
    """Parse user-typed money text; anything unparseable is zero."""
    cleaned = re.sub(r"[^0-9.\-]", "", text or "")
    # Mirror parseFloat: keep the longest leading numeric prefix.
    match = re.match(r"-?\d*\.?\d+|-?\d+\.?", cleaned)
    if not match:
        return ZERO
    try:
        return Decimal(match.group(0).rstrip(".") or "0")
    except InvalidOperation:
        return ZERO


def calculate_percentage(amount: MoneyLike, percentage: MoneyLike) -> Decimal:
    """Return ``percentage`` percent of ``amount`` (13 means 13%)."""
    return to_decimal(amount) * to_decimal(percentage) / Decimal(100)


def non_negative_amount(value: Any, field_name: str, optional: bool = True) -> Decimal | None:
    """Validate an amount arriving from outside (OCR, HTTP, CLI).

    Raises:
        ValueError: If the amount is missing (when required), not a number,
            not finite, or negative.
    """
    if value is None:
        if optional:
            return None
        raise ValueError(f"{field_name} is required")
    try:
        amount = to_decimal(value)
    except TypeError as exc:
        raise ValueError(f"{field_name} must be a number, got {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"{field_name} must be a finite amount, got {value!r}")
    if amount < 0:
        raise ValueError(f"{field_name} must not be negative, got {value!r}")
    return amount
