"""Rupee amount helpers."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    """Round to paise, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: object) -> str:
    """Format an amount for customer messages: 500 stays "500", 499.5 becomes "499.50"."""
    amount = Decimal(str(value))
    if amount == amount.to_integral_value():
        return str(amount.quantize(Decimal("1")))
    return f"{amount:.2f}"
