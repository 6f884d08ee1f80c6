from __future__ import annotations

from decimal import Decimal

import pytest

from receiptsplit.domain.money import (
    calculate_percentage,
    format_currency,
    non_negative_amount,
    parse_currency,
    round_money,
    to_decimal,
)


def test_to_decimal_goes_through_str_for_floats() -> None:
    assert to_decimal(20.99) == Decimal("20.99")
    assert to_decimal(None) == Decimal("0")
    assert to_decimal(None, default=Decimal("1")) == Decimal("1")
    with pytest.raises(ValueError):
        to_decimal("twelve")


def test_format_currency() -> None:
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(Decimal("-3.005")) == "-$3.01"
    assert format_currency(2) == "$2.00"
    assert format_currency(Decimal("3"), "EUR") == "EUR 3.00"


def test_parse_currency() -> None:
    assert parse_currency("$1,234.50") == Decimal("1234.50")
    assert parse_currency("-4.20 CAD") == Decimal("-4.20")
    assert parse_currency("12.3.4") == Decimal("12.3")
    assert parse_currency("abc") == Decimal("0")
    assert parse_currency("") == Decimal("0")


def test_percentage_and_rounding() -> None:
    assert calculate_percentage(Decimal("200"), 13) == Decimal("26")
    assert round_money(Decimal("2.345")) == Decimal("2.35")


def test_non_negative_amount() -> None:
    assert non_negative_amount("1.50", "price") == Decimal("1.50")
    assert non_negative_amount(None, "discount") is None
    for bad in ("-1", "NaN", "Infinity", "abc", True):
        with pytest.raises(ValueError):
            non_negative_amount(bad, "price")
    with pytest.raises(ValueError, match="price is required"):
        non_negative_amount(None, "price", optional=False)
