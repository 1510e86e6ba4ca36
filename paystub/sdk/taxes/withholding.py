"""Per-period federal income tax, Social Security and Medicare.

Each calculator returns the period's contribution, not the annual tax. The
caller supplies the year-to-date gross pay before the period, so a payment
that straddles the SS wage cap or the Additional Medicare threshold is split
into the part below the boundary and the part above it.

All functions are pure: no table lookups, no accumulator access.
"""

from decimal import Decimal
from typing import Mapping, Sequence

from ..errors import InvalidInputError
from ..money import ZERO, round_cents
from ..schemas import FilingStatus
from .schemas import TaxBracket


def _require_non_negative(**values: Decimal) -> None:
    for name, value in values.items():
        if not value.is_finite() or value < 0:
            raise InvalidInputError(f"{name} must be a finite non-negative amount, got {value}")


def annualize(period_gross: Decimal, periods_per_year: int) -> Decimal:
    """Flat projection of one period's gross to a full year.

    Every period is annualized on its own (gross x periods), not from
    running YTD, so constant pay always lands in the same brackets.
    """
    return period_gross * periods_per_year


def calc_federal_income_tax(
    period_gross: Decimal,
    annualized_gross: Decimal,
    brackets: Sequence[TaxBracket],
) -> Decimal:
    """Federal income tax for one period using a bracket walk.

    The period's gross is spread across brackets in the same proportion as
    the annualized income fills them: a bracket holding N dollars of the
    annualized income holds N x period_gross / annualized_gross of this
    period's pay. Whatever the bracket cannot hold carries to the next.

    Args:
        period_gross: Gross pay for the period
        annualized_gross: Income used for bracket lookup (see annualize())
        brackets: Ascending ladder ending in an unbounded bracket

    Returns:
        Federal tax for the period, rounded to cents

    Example:
        $2,400 biweekly single (annualized $62,400) spans the 10%, 12% and
        22% brackets -> $9,035.50 / 26 = $347.52 per period.
    """
    _require_non_negative(period_gross=period_gross, annualized_gross=annualized_gross)
    if period_gross == 0 or annualized_gross == 0:
        return ZERO

    tax = Decimal(0)
    remaining = period_gross
    previous_limit = Decimal(0)

    for bracket in brackets:
        if remaining <= 0 or annualized_gross <= previous_limit:
            break
        in_bracket = min(annualized_gross, bracket.upper_limit) - previous_limit
        if in_bracket > 0:
            portion = min(remaining, in_bracket * period_gross / annualized_gross)
            tax += portion * bracket.rate
            remaining -= portion
        previous_limit = bracket.upper_limit

    return round_cents(tax)


def calc_ss_withholding(
    period_gross: Decimal,
    ytd_gross_before: Decimal,
    wage_cap: Decimal,
    rate: Decimal,
) -> Decimal:
    """Social Security tax for one period, respecting the annual wage cap.

    - YTD gross already at the cap: 0
    - This period crosses the cap: only the remaining headroom is taxed
    - Otherwise: the full period is taxed

    Rounding is applied to cumulative taxed wages (tax through this period
    minus tax through the prior period), so a year's total never exceeds
    round(wage_cap x rate) and stays exact to the cent.
    Below the cap a period can differ by a cent from round(gross x rate).

    Args:
        period_gross: Gross pay for the period
        ytd_gross_before: YTD gross pay before this period (not YTD SS withheld)
        wage_cap: SS wage base
        rate: SS rate (employee portion)
    """
    _require_non_negative(
        period_gross=period_gross, ytd_gross_before=ytd_gross_before,
        wage_cap=wage_cap, rate=rate,
    )
    if ytd_gross_before >= wage_cap:
        return ZERO

    taxed_before = min(ytd_gross_before, wage_cap)
    taxed_after = min(ytd_gross_before + period_gross, wage_cap)
    return round_cents(taxed_after * rate) - round_cents(taxed_before * rate)


def calc_additional_medicare(
    period_gross: Decimal,
    ytd_gross_before: Decimal,
    threshold: Decimal,
    additional_rate: Decimal,
) -> Decimal:
    """Additional Medicare tax on wages over the threshold.

    - YTD gross already over the threshold: the whole period
    - This period crosses it: only the excess above the threshold
    - Otherwise: 0
    """
    _require_non_negative(
        period_gross=period_gross, ytd_gross_before=ytd_gross_before,
        threshold=threshold, additional_rate=additional_rate,
    )
    ytd_after = ytd_gross_before + period_gross
    if ytd_gross_before >= threshold:
        additional_wages = period_gross
    elif ytd_after > threshold:
        additional_wages = ytd_after - threshold
    else:
        return ZERO
    return round_cents(additional_wages * additional_rate)


def calc_medicare_withholding(
    period_gross: Decimal,
    ytd_gross_before: Decimal,
    filing_status: FilingStatus,
    base_rate: Decimal,
    additional_rate: Decimal,
    thresholds: Mapping[FilingStatus, Decimal],
) -> Decimal:
    """Medicare tax for one period: base rate on all wages plus Additional Medicare.

    Medicare has no wage cap. The Additional Medicare threshold is looked
    up by filing status.
    """
    _require_non_negative(period_gross=period_gross, base_rate=base_rate)
    try:
        threshold = thresholds[FilingStatus(filing_status)]
    except KeyError:
        raise InvalidInputError(f"No Additional Medicare threshold for '{filing_status}'") from None

    base = round_cents(period_gross * base_rate)
    additional = calc_additional_medicare(period_gross, ytd_gross_before, threshold, additional_rate)
    return base + additional
