"""Tests for integer money helpers."""

from decimal import Decimal

import pytest

from costbasis import ValidationError
from costbasis.ledger.money import (
    allocate,
    div_round_half_even,
    fiat_value,
    format_cents,
    format_sat,
    to_cents,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("20000.00", 2_000_000),
        ("20000", 2_000_000),
        (20000, 2_000_000),
        (0.1, 10),
        (Decimal("1.005"), 100),
        ("1.015", 102),
        (" 30000.5 ", 3_000_050),
    ],
)
def test_to_cents(value, expected):
    assert to_cents(value) == expected


@pytest.mark.parametrize("value", ["abc", "", "NaN", "inf", True, None])
def test_to_cents_rejects_invalid(value):
    with pytest.raises(ValidationError):
        to_cents(value, "tx-1")


@pytest.mark.parametrize(
    "num, den, expected",
    [(5, 2, 2), (7, 2, 4), (-5, 2, -2), (1, 3, 0), (2, 3, 1), (10, 5, 2)],
)
def test_div_round_half_even(num, den, expected):
    assert div_round_half_even(num, den) == expected


def test_div_round_half_even_rejects_zero_denominator():
    with pytest.raises(ValueError):
        div_round_half_even(1, 0)


def test_fiat_value():
    # 0.001 BTC at $20,000
    assert fiat_value(100_000, 2_000_000) == 2000
    # 1 sat at $500,000 is half a cent, rounds to even
    assert fiat_value(1, 50_000_000) == 0
    assert fiat_value(3, 50_000_000) == 2


def test_allocate_sums_to_rounded_total():
    shares = allocate([1, 1, 1], 3)
    assert shares == [1, 0, 0]
    assert sum(shares) == 1

    numerators = [33_333 * 7, 33_333 * 7, 33_334 * 7]
    shares = allocate(numerators, 100)
    assert sum(shares) == div_round_half_even(sum(numerators), 100)


def test_allocate_empty():
    assert allocate([], 10) == []


def test_formatting():
    assert format_cents(-1005) == "-10.05"
    assert format_cents(5) == "0.05"
    assert format_cents(2_000_000) == "20000.00"
    assert format_sat(100_000) == "0.00100000"
    assert format_sat(250_000_000) == "2.50000000"
    assert format_sat(-1) == "-0.00000001"
