"""
Decimal precision helpers.

Money is kept at 2 decimal places, stock and recipe quantities at 4. Never
use float for either. Rounding is ROUND_HALF_EVEN (banker's rounding) so
repeated recalculation cannot drift in one direction.
"""

from decimal import Decimal, ROUND_HALF_EVEN

MONEY_PLACES = Decimal("0.01")
QUANTITY_PLACES = Decimal("0.0001")

ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Convert int/str/Decimal to Decimal without going through float."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value) -> Decimal:
    return to_decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_EVEN)


def quantize_quantity(value) -> Decimal:
    return to_decimal(value).quantize(QUANTITY_PLACES, rounding=ROUND_HALF_EVEN)
