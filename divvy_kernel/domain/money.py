"""
Money -- integer-pence conversion and the single sanctioned rounding rule.

Responsibility:
    Converts between major-unit amounts (pounds, as Decimal) and integer
    minor units (pence). Every exact computation in the engines happens on
    integers produced here; conversion back to pounds is the last step
    before output or display.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by value objects and every engine module.

Invariants enforced:
    - One rounding mode system-wide: ROUND_HALF_UP on Decimal, which rounds
      halves away from zero. to_pence() and round_pence() share it.
    - from_pence() never rounds; it only shifts the decimal point.
    - Floats are converted through str() so binary drift never reaches
      the quantize step (0.1 + 0.2 style inputs stay exact).

Failure modes:
    - decimal.InvalidOperation for non-numeric or non-finite input. Amounts
      above MAX_AMOUNT can exceed the decimal context; value objects reject
      them first. Callers
      guarantee finite numbers; these functions do not reject negatives.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

DEFAULT_ROUNDING = ROUND_HALF_UP
PENCE_PER_POUND = 100
DECIMAL_PLACES = 2

# Largest amount a value object accepts. Pence products stay far inside the
# default 28-digit decimal context below it.
MAX_AMOUNT = Decimal("1000000000000")

_ONE = Decimal("1")


def _as_decimal(value: Decimal | int | str | float) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_pence(amount: Decimal | int | str | float) -> int:
    """
    Convert a pound amount to integer pence.

    Postconditions:
        Returns amount * 100 rounded to the nearest integer, halves away
        from zero.

    Example:
        to_pence("10.505") -> 1051
    """
    scaled = _as_decimal(amount) * PENCE_PER_POUND
    return int(scaled.quantize(_ONE, rounding=DEFAULT_ROUNDING))


def from_pence(pence: int) -> Decimal:
    """
    Convert integer pence to a pound amount with exactly two decimal places.

    Example:
        from_pence(312500) -> Decimal("3125.00")
    """
    return Decimal(pence).scaleb(-DECIMAL_PLACES)


def round_pence(value: Decimal | int | str | float) -> int:
    """Round a fractional pence quantity (e.g. pence * rate) to whole pence."""
    return int(_as_decimal(value).quantize(_ONE, rounding=DEFAULT_ROUNDING))


def format_gbp(amount: Decimal | int | str | float) -> str:
    """Format as sterling with thousands separators, e.g. ``£1,234.50``."""
    value = from_pence(to_pence(amount))
    if value < 0:
        return f"-£{-value:,.2f}"
    return f"£{value:,.2f}"


def format_percent(rate: Decimal | int | str | float) -> str:
    """Format a 0-1 rate as a percentage with two decimals, e.g. ``8.75%``."""
    percent = _as_decimal(rate) * 100
    return f"{percent.quantize(Decimal('0.01'), rounding=DEFAULT_ROUNDING)}%"
