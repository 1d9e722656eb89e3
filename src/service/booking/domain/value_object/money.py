"""
Monetary helpers

All prices and totals are `Decimal` quantized to 2 decimal places with
half-up rounding. Floats never enter a money computation.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.platform.exception.exceptions import ValidationError


CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def to_money(value: Decimal | int | str | float) -> Decimal:
    try:
        # float goes through str() so 0.1 stays 0.1 instead of 0.1000000000000000055
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f'Invalid monetary amount: {value!r}') from e
    if not amount.is_finite():
        raise ValidationError(f'Invalid monetary amount: {value!r}')
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_total(unit_price: Decimal, quantity: int) -> Decimal:
    return to_money(to_money(unit_price) * quantity)


def to_minor_units(amount: Decimal) -> int:
    """Payment providers take integer sub-units (paise, cents)."""
    return int((to_money(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_minor_units(value: int) -> Decimal:
    return to_money(Decimal(value) / 100)
