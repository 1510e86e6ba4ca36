"""Pay calendar generation.

A year's rules may carry a fixed calendar per frequency (payroll calendars
shift around holidays and month ends, so a table beats a formula). Bundled
years ship a fixed biweekly calendar. Frequencies without a table use the
rules below:

- weekly / biweekly: first Monday of the year, then every 7 / 14 days
- semimonthly: the 15th and the last day of each month
- monthly: last day of the month, moved back to Friday on weekends
"""

import calendar
from datetime import date, timedelta
from typing import Union

from .errors import ConfigurationDriftError
from .schemas import PAY_PERIODS, PayFrequency
from .taxes.rules import TaxTable
from .taxes.schemas import validate_pay_calendar

MONDAY = 0
FRIDAY = 4
SATURDAY = 5


def get_pay_periods(frequency: Union[PayFrequency, str]) -> int:
    """Get number of pay periods per year for a frequency."""
    return PAY_PERIODS[PayFrequency(frequency)]


def get_period_days(frequency: PayFrequency) -> int:
    """Get number of days between pay dates for fixed-interval frequencies."""
    return {
        PayFrequency.WEEKLY: 7,
        PayFrequency.BIWEEKLY: 14,
    }[frequency]


def _first_weekday(year: int, weekday: int) -> date:
    first = date(year, 1, 1)
    return first + timedelta(days=(weekday - first.weekday()) % 7)


def _last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def _rule_pay_dates(year: int, frequency: PayFrequency) -> list[date]:
    if frequency in (PayFrequency.WEEKLY, PayFrequency.BIWEEKLY):
        step = timedelta(days=get_period_days(frequency))
        first_pay_date = _first_weekday(year, MONDAY)
        return [first_pay_date + step * i for i in range(get_pay_periods(frequency))]

    if frequency == PayFrequency.SEMIMONTHLY:
        pay_dates = []
        for month in range(1, 13):
            pay_dates.append(date(year, month, 15))
            pay_dates.append(_last_day_of_month(year, month))
        return pay_dates

    # Monthly: last business day, approximated as last weekday
    pay_dates = []
    for month in range(1, 13):
        pay_date = _last_day_of_month(year, month)
        if pay_date.weekday() >= SATURDAY:
            pay_date -= timedelta(days=pay_date.weekday() - FRIDAY)
        pay_dates.append(pay_date)
    return pay_dates


def generate_pay_dates(
    year: int,
    frequency: Union[PayFrequency, str],
    tax_table: TaxTable,
) -> tuple[date, ...]:
    """Generate every pay date of a year, in order.

    Args:
        year: Calendar year
        frequency: Pay frequency
        tax_table: Loaded tax table; the year must be supported

    Returns:
        Strictly increasing dates, one per pay period

    Raises:
        UnsupportedYearError: If the table has no entry for the year
        ConfigurationDriftError: If the resulting calendar is malformed
    """
    frequency = PayFrequency(frequency)
    rules = tax_table.rules_for(year)

    fixed = rules.pay_calendar.get(frequency)
    pay_dates = list(fixed) if fixed is not None else _rule_pay_dates(year, frequency)

    try:
        validate_pay_calendar(year, frequency, pay_dates)
    except ValueError as e:
        raise ConfigurationDriftError(f"{frequency.value} calendar for {year}: {e}") from e

    return tuple(pay_dates)
