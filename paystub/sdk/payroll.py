"""Payroll run: period-by-period calculation for a calendar year.

A run is a strict left fold over the year's pay dates:

    (ytd, period) -> (ytd + record, record)

Each step computes gross pay, federal tax on the flat annualization, Social
Security and Medicare against YTD gross *before* the period, state tax and
other deductions, then net pay. The accumulator starts at zero for every run
and is never shared, so independent runs can execute concurrently against
the same TaxTable.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from functools import cached_property
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from .earnings import calc_gross_pay
from .errors import InvalidInputError, PayrollError
from .money import round_cents, to_decimal
from .pay_calendar import generate_pay_dates
from .schemas import AnnualSummary, EmployeeProfile, PayPeriodRecord, YTDAccumulator
from .summary import summarize
from .taxes.rules import TaxTable, TaxTableSlice
from .taxes.withholding import (
    annualize,
    calc_federal_income_tax,
    calc_medicare_withholding,
    calc_ss_withholding,
)

logger = logging.getLogger(__name__)

# (period_gross, ytd_gross_before) -> state tax for the period
StateTaxFn = Callable[[Decimal, Decimal], Decimal]


def parse_employee_profile(data: Dict[str, Any]) -> EmployeeProfile:
    """Validate raw profile data (from YAML, JSON or a form).

    Raises:
        InvalidInputError: With every field-level problem in the message
    """
    try:
        return EmployeeProfile.model_validate(data)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid employee profile\n{e}") from e


def flat_state_tax(state_rate: Decimal) -> StateTaxFn:
    """State tax as a flat rate on each period's gross."""
    def calc(period_gross: Decimal, ytd_gross_before: Decimal) -> Decimal:
        return round_cents(period_gross * state_rate)
    return calc


@dataclass(frozen=True)
class RunContext:
    """Everything a period step needs that does not change during the run."""

    profile: EmployeeProfile
    rules: TaxTableSlice
    state_tax: StateTaxFn


def apply_period(
    ytd: YTDAccumulator,
    context: RunContext,
    period_index: int,
    pay_date: date,
) -> tuple[YTDAccumulator, PayPeriodRecord]:
    """Compute one period and fold it into the YTD totals.

    Args:
        ytd: Totals through the previous period
        context: Profile, year rules and state tax function
        period_index: 1-based period number
        pay_date: Pay date for the period

    Returns:
        Tuple of (new YTD totals, period record)
    """
    profile = context.profile
    rules = context.rules

    gross = calc_gross_pay(
        profile.hours_per_period,
        profile.hourly_rate,
        profile.overtime_hours,
        profile.overtime_rate,
    )
    ytd_gross_before = ytd.gross_pay

    federal_tax = calc_federal_income_tax(
        gross, annualize(gross, profile.periods_per_year), rules.brackets
    )
    social_security = calc_ss_withholding(
        gross, ytd_gross_before, rules.ss_wage_cap, rules.ss_rate
    )
    medicare = calc_medicare_withholding(
        gross,
        ytd_gross_before,
        rules.filing_status,
        rules.medicare_rate,
        rules.additional_medicare_rate,
        {rules.filing_status: rules.additional_medicare_threshold},
    )
    state_tax = round_cents(to_decimal(context.state_tax(gross, ytd_gross_before)))
    if state_tax < 0:
        raise InvalidInputError(f"state tax cannot be negative, got {state_tax}")
    other_deductions = round_cents(profile.total_other_deductions)

    net_pay = gross - (federal_tax + social_security + medicare + state_tax + other_deductions)

    record = PayPeriodRecord(
        period_index=period_index,
        pay_date=pay_date,
        hours=profile.hours_per_period + profile.overtime_hours,
        gross_pay=gross,
        federal_tax=federal_tax,
        social_security=social_security,
        medicare=medicare,
        state_tax=state_tax,
        other_deductions=other_deductions,
        net_pay=net_pay,
    )
    return ytd.add(record), record


@dataclass(frozen=True)
class PayrollRun:
    """Completed run: ordered period records and final YTD totals."""

    profile: EmployeeProfile
    year: int
    records: tuple[PayPeriodRecord, ...]
    ytd: YTDAccumulator

    @cached_property
    def summary(self) -> AnnualSummary:
        return summarize(self.records, self.profile)

    def get_period(self, period_index: int) -> PayPeriodRecord:
        """Record for a 1-based period number.

        Raises:
            InvalidInputError: If the period is outside the run
        """
        if not 1 <= period_index <= len(self.records):
            raise InvalidInputError(
                f"Period {period_index} out of range (1-{len(self.records)})"
            )
        return self.records[period_index - 1]

    def ytd_through(self, period_index: int) -> YTDAccumulator:
        """YTD totals as of the end of a period (what a pay stub shows)."""
        ytd = YTDAccumulator.zero()
        for record in self.records[:period_index]:
            ytd = ytd.add(record)
        return ytd


def run_payroll(
    profile: EmployeeProfile,
    tax_table: TaxTable,
    state_tax: Optional[StateTaxFn] = None,
) -> PayrollRun:
    """Run payroll for every pay period of the profile's year.

    Args:
        profile: Validated employee inputs (see parse_employee_profile)
        tax_table: Loaded tax table (see load_tax_table)
        state_tax: Optional state tax function; defaults to a flat
            profile.state_rate on each period's gross

    Returns:
        PayrollRun with one record per period, in pay date order

    Raises:
        UnsupportedYearError: No rules or calendar for the year (before any period)
        InvalidInputError: Invalid profile values (before any period)
        PayrollError: Any failure inside period i, re-raised as the same
            kind with period_index=i and last_completed_period=i-1
    """
    if not isinstance(profile, EmployeeProfile):
        profile = parse_employee_profile(profile)

    year = profile.year
    rules = tax_table.lookup(year, profile.filing_status)
    pay_dates = generate_pay_dates(year, profile.pay_frequency, tax_table)
    # Invalid pay inputs fail here, before period 1
    calc_gross_pay(
        profile.hours_per_period, profile.hourly_rate,
        profile.overtime_hours, profile.overtime_rate,
    )

    context = RunContext(
        profile=profile,
        rules=rules,
        state_tax=state_tax or flat_state_tax(profile.state_rate),
    )

    logger.debug(
        f"payroll run: {year} {profile.pay_frequency.value} {profile.filing_status.value}, "
        f"{len(pay_dates)} periods"
    )

    ytd = YTDAccumulator.zero()
    records = []
    for period_index, pay_date in enumerate(pay_dates, start=1):
        try:
            ytd, record = apply_period(ytd, context, period_index, pay_date)
        except PayrollError as e:
            logger.warning(f"payroll run aborted at period {period_index}: {e}")
            raise e.at_period(period_index) from e
        except (ArithmeticError, TypeError, ValueError) as e:
            logger.warning(f"payroll run aborted at period {period_index}: {e}")
            raise InvalidInputError(str(e)).at_period(period_index) from e
        records.append(record)

    logger.debug(f"payroll run complete: gross {ytd.gross_pay}, net {ytd.net_pay}")
    return PayrollRun(profile=profile, year=year, records=tuple(records), ytd=ytd)
