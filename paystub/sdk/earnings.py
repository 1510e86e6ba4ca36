"""Gross pay for a single period."""

from decimal import Decimal
from typing import Optional

from .errors import InvalidInputError
from .money import ZERO, round_cents, to_decimal

OVERTIME_MULTIPLIER = Decimal("1.5")


def _amount(name: str, value) -> Decimal:
    try:
        amount = to_decimal(value)
    except ValueError as e:
        raise InvalidInputError(f"{name}: {e}") from None
    if amount < 0:
        raise InvalidInputError(f"{name} cannot be negative, got {amount}")
    return amount


def calc_gross_pay(
    hours,
    hourly_rate,
    overtime_hours=ZERO,
    overtime_rate: Optional[Decimal] = None,
) -> Decimal:
    """Calculate one period's gross pay including overtime.

    gross = hours x hourly_rate + overtime_hours x overtime_rate

    Args:
        hours: Regular hours worked in the period
        hourly_rate: Regular hourly rate
        overtime_hours: Overtime hours (default 0)
        overtime_rate: Overtime hourly rate (default 1.5x hourly_rate)

    Returns:
        Gross pay rounded to cents

    Raises:
        InvalidInputError: If any input is negative or non-finite, or the
            result overflows
    """
    hours = _amount("hours", hours)
    hourly_rate = _amount("hourly_rate", hourly_rate)
    overtime_hours = _amount("overtime_hours", overtime_hours)
    if overtime_rate is not None:
        overtime_rate = _amount("overtime_rate", overtime_rate)

    try:
        if overtime_rate is None:
            overtime_rate = hourly_rate * OVERTIME_MULTIPLIER
        return round_cents(hours * hourly_rate + overtime_hours * overtime_rate)
    except ArithmeticError:
        raise InvalidInputError(
            f"gross pay for {hours}h at {hourly_rate} is not representable"
        ) from None
