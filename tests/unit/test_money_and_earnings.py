"""Unit tests for Decimal money helpers and gross pay calculation."""

from decimal import Decimal

import pytest

from paystub.sdk.earnings import calc_gross_pay
from paystub.sdk.errors import InvalidInputError
from paystub.sdk.money import format_money, round_cents, to_decimal


class TestToDecimal:

    def test_float_keeps_its_decimal_form(self):
        """0.062 must not become 0.06199999..."""
        assert to_decimal(0.062) == Decimal("0.062")
        assert to_decimal(0.0145) == Decimal("0.0145")

    def test_currency_string(self):
        assert to_decimal("$1,234.50") == Decimal("1234.50")

    def test_int_and_decimal_pass_through(self):
        assert to_decimal(80) == Decimal(80)
        assert to_decimal(Decimal("2.5")) == Decimal("2.5")

    @pytest.mark.parametrize("value", [True, "abc", None, float("nan"), float("inf"), "Infinity"])
    def test_rejects_non_numeric_and_non_finite(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)


def test_round_cents_is_half_up():
    assert round_cents(Decimal("394.665")) == Decimal("394.67")
    assert round_cents(Decimal("0.125")) == Decimal("0.13")
    assert round_cents(Decimal("347.5192")) == Decimal("347.52")


def test_format_money():
    assert format_money(Decimal("2400")) == "2400.00"
    assert format_money(Decimal("-12.5")) == "-12.50"


class TestCalcGrossPay:

    def test_regular_hours(self):
        assert calc_gross_pay(Decimal(80), Decimal(30)) == Decimal("2400.00")

    def test_overtime_defaults_to_time_and_a_half(self):
        # 80 x 20 + 10 x 30
        assert calc_gross_pay(80, 20, overtime_hours=10) == Decimal("1900.00")

    def test_explicit_overtime_rate(self):
        assert calc_gross_pay(80, 20, overtime_hours=10, overtime_rate=35) == Decimal("1950.00")

    def test_rounds_to_cents(self):
        # 37.5 x 19.99 = 749.625
        assert calc_gross_pay("37.5", "19.99") == Decimal("749.63")

    def test_zero_hours(self):
        assert calc_gross_pay(0, 30) == Decimal("0.00")

    @pytest.mark.parametrize("kwargs", [
        {"hours": -1, "hourly_rate": 30},
        {"hours": 80, "hourly_rate": -30},
        {"hours": 80, "hourly_rate": 30, "overtime_hours": -2},
        {"hours": 80, "hourly_rate": 30, "overtime_hours": 2, "overtime_rate": -1},
        {"hours": "NaN", "hourly_rate": 30},
        {"hours": 80, "hourly_rate": "thirty"},
    ])
    def test_invalid_inputs(self, kwargs):
        with pytest.raises(InvalidInputError):
            calc_gross_pay(**kwargs)
