"""Price formatting for the payment API.

CRYPTO prices are sent as decimal amounts; STRIPE prices are sent in the
currency's minimum unit.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from payrelay.core.exceptions import ValidationError

# Currencies whose minimum unit is 1/100 of the displayed amount
CENTS_BASED_CURRENCIES = {"USD", "THB", "TWD"}

# Decimal places accepted per crypto currency
CRYPTO_DECIMALS = {"KAIA": 4, "USDT": 2}


def _to_decimal(amount: Decimal | float | int | str) -> Decimal:
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValidationError(f"Invalid price: {amount!r}")
    if not value.is_finite():
        raise ValidationError(f"Invalid price: {amount!r}")
    return value


def _plain(value: Decimal) -> str:
    """Fixed-point string without trailing zeros."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def format_price(amount: Decimal | float | int | str, currency: str, pg_type: str) -> str:
    """Convert ``amount`` into the payment API's price string.

    Args:
        amount: Price in display units (e.g. 1.5 KAIA, 10.00 USD)
        currency: Currency code
        pg_type: Payment gateway type, CRYPTO or STRIPE

    Returns:
        Price string as expected by the payment API
    """
    value = _to_decimal(amount)
    currency = currency.upper()

    if pg_type.upper() == "CRYPTO":
        if currency == "KAIA":
            quantized = value.quantize(Decimal(1).scaleb(-CRYPTO_DECIMALS["KAIA"]), rounding=ROUND_HALF_UP)
            return _plain(quantized)
        if currency == "USDT":
            quantized = value.quantize(Decimal(1).scaleb(-CRYPTO_DECIMALS["USDT"]), rounding=ROUND_HALF_UP)
            return format(quantized, "f")
        return _plain(value)

    if currency in CENTS_BASED_CURRENCIES:
        value = value * 100

    # KRW and JPY have no minor unit
    return str(int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP)))
