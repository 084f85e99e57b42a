# core/money.py

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from core.exceptions import ValidationError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value) -> Decimal:
    """
    Quantize to 2dp. Raises ValidationError on anything that is not a number.
    """
    if value is None or value == "":
        return ZERO
    try:
        return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError(f"Invalid amount: {value!r}") from exc


def positive_money(value, *, field: str = "amount") -> Decimal:
    amount = money(value)
    if amount <= ZERO:
        raise ValidationError(f"{field} must be greater than 0")
    return amount
