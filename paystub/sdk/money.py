"""Decimal money helpers.

All currency math runs on Decimal. Floats coming from YAML or JSON are
converted through their shortest repr so 0.062 stays 0.062 rather than the
binary approximation.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
INFINITY = Decimal("Infinity")


def to_decimal(value: Any) -> Decimal:
    """Convert int/float/str/Decimal to a finite Decimal.

    Raises:
        ValueError: If the value is not numeric or is NaN/infinite
    """
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Expected a finite number, got {value!r}")
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip().replace(",", "").lstrip("$"))
        except InvalidOperation:
            raise ValueError(f"Expected a number, got {value!r}") from None
    else:
        raise ValueError(f"Expected a number, got {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"Expected a finite number, got {value!r}")
    return result


def round_cents(amount: Decimal) -> Decimal:
    """Round to cents, half up (394.665 -> 394.67)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal) -> str:
    """Two fraction digits, no grouping: 2400 -> '2400.00'."""
    return f"{round_cents(amount):.2f}"


# Pydantic field types. Constraints (ge/le) are added per field.
Money = Annotated[Decimal, BeforeValidator(to_decimal)]
Rate = Annotated[Decimal, BeforeValidator(to_decimal)]
