"""Pydantic schemas for tax rules validation.

These schemas validate the tax_rules/*.yaml files and provide typed access
to per-year payroll tax parameters: SS wage cap, Medicare rates and
thresholds, federal bracket ladders and fixed pay calendars.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..money import INFINITY, Money, Rate
from ..schemas import PAY_PERIODS, FilingStatus, PayFrequency


class TaxBracket(BaseModel):
    """Single tax bracket entry."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    up_to: Optional[Money] = Field(default=None, gt=0, description="Upper bound (None if 'over' bracket)")
    over: Optional[Money] = Field(default=None, ge=0, description="Lower bound for top bracket")
    rate: Rate = Field(..., ge=0, le=1, description="Marginal tax rate as decimal")

    @model_validator(mode="after")
    def check_bounds(self) -> "TaxBracket":
        if (self.up_to is None) == (self.over is None):
            raise ValueError("bracket needs exactly one of 'up_to' or 'over'")
        return self

    @property
    def upper_limit(self) -> Decimal:
        """Upper bound, infinite for the top bracket."""
        return INFINITY if self.up_to is None else self.up_to


def validate_bracket_ladder(brackets: Sequence[TaxBracket]) -> None:
    """Check a ladder is ascending and covers every non-negative income.

    Raises:
        ValueError: With the first violation found
    """
    if not brackets:
        raise ValueError("bracket ladder is empty")

    previous_limit = Decimal(0)
    previous_rate = Decimal(0)
    for position, bracket in enumerate(brackets, start=1):
        is_top = position == len(brackets)
        if bracket.up_to is None and not is_top:
            raise ValueError(f"bracket {position}: unbounded bracket before the end of the ladder")
        if is_top and bracket.up_to is not None:
            raise ValueError(f"bracket {position}: ladder must end with an unbounded 'over' bracket")
        if bracket.over is not None and bracket.over != previous_limit:
            raise ValueError(
                f"bracket {position}: 'over' {bracket.over} does not continue from {previous_limit}"
            )
        if bracket.upper_limit <= previous_limit:
            raise ValueError(
                f"bracket {position}: limit {bracket.upper_limit} not above {previous_limit}"
            )
        if bracket.rate < previous_rate:
            raise ValueError(
                f"bracket {position}: rate {bracket.rate} below previous rate {previous_rate}"
            )
        previous_limit = bracket.upper_limit
        previous_rate = bracket.rate


class SocialSecurityRules(BaseModel):
    """Social Security tax rules."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    wage_cap: Money = Field(..., gt=0, description="SS wage base (max taxable)")
    tax_rate: Rate = Field(..., ge=0, le=1, description="SS tax rate (employee portion)")


class MedicareRules(BaseModel):
    """Medicare and Additional Medicare tax rules."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    tax_rate: Rate = Field(..., ge=0, le=1, description="Base Medicare rate, no wage cap")
    additional_rate: Rate = Field(..., ge=0, le=1, description="Additional Medicare rate")
    additional_threshold: dict[FilingStatus, Money] = Field(
        ..., description="Income above which the additional rate applies, per filing status"
    )


class TaxYearRules(BaseModel):
    """Complete payroll tax rules for a year."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    year: int = Field(..., ge=1900, le=9999)
    social_security: SocialSecurityRules
    medicare: MedicareRules
    federal_brackets: dict[FilingStatus, tuple[TaxBracket, ...]]
    pay_calendar: dict[PayFrequency, tuple[date, ...]] = Field(
        default_factory=dict,
        description="Fixed pay dates for this year, by frequency (optional)",
    )

    @model_validator(mode="after")
    def check_invariants(self) -> "TaxYearRules":
        errors = []

        for status in FilingStatus:
            if status not in self.medicare.additional_threshold:
                errors.append(f"medicare.additional_threshold missing '{status.value}'")
            if status not in self.federal_brackets:
                errors.append(f"federal_brackets missing '{status.value}'")
                continue
            try:
                validate_bracket_ladder(self.federal_brackets[status])
            except ValueError as e:
                errors.append(f"federal_brackets.{status.value}: {e}")

        for frequency, dates in self.pay_calendar.items():
            try:
                validate_pay_calendar(self.year, frequency, dates)
            except ValueError as e:
                errors.append(f"pay_calendar.{frequency.value}: {e}")

        if errors:
            raise ValueError("; ".join(errors))
        return self


def validate_pay_calendar(year: int, frequency: PayFrequency, dates: Sequence[date]) -> None:
    """Check a calendar has one strictly increasing date per period, all in the year.

    Raises:
        ValueError: With the first violation found
    """
    expected = PAY_PERIODS[frequency]
    if len(dates) != expected:
        raise ValueError(f"expected {expected} pay dates, got {len(dates)}")
    for previous, current in zip(dates, dates[1:]):
        if current <= previous:
            raise ValueError(f"pay dates not increasing: {previous} then {current}")
    outside = [d for d in dates if d.year != year]
    if outside:
        raise ValueError(f"pay date {outside[0]} outside {year}")
