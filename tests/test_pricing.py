from decimal import Decimal

import pytest

from payrelay.core.exceptions import ValidationError
from payrelay.utils.pricing import format_price


@pytest.mark.parametrize(
    "amount,currency,expected",
    [
        (1, "KAIA", "1"),
        (1.0, "KAIA", "1"),
        ("1.5000", "KAIA", "1.5"),
        ("0.12345", "KAIA", "0.1235"),
        ("10", "KAIA", "10"),
        (Decimal("2.5"), "USDT", "2.50"),
        ("2.555", "USDT", "2.56"),
        ("0.25", "KAIROS", "0.25"),
    ],
)
def test_crypto_prices(amount, currency, expected):
    assert format_price(amount, currency, "CRYPTO") == expected


@pytest.mark.parametrize(
    "amount,currency,expected",
    [
        ("10.00", "USD", "1000"),
        ("0.015", "USD", "2"),
        ("99.99", "THB", "9999"),
        ("5", "TWD", "500"),
        ("1000", "KRW", "1000"),
        ("150.5", "JPY", "151"),
    ],
)
def test_stripe_prices_use_minimum_unit(amount, currency, expected):
    assert format_price(amount, currency, "STRIPE") == expected


def test_currency_and_pg_type_are_case_insensitive():
    assert format_price("10", "usd", "stripe") == "1000"


@pytest.mark.parametrize("amount", ["abc", "NaN", "Infinity"])
def test_invalid_price(amount):
    with pytest.raises(ValidationError):
        format_price(amount, "KAIA", "CRYPTO")
