"""W-2 style wage and tax statement from an annual summary."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .money import Money, format_money
from .schemas import AnnualSummary
from .taxes.schemas import TaxYearRules


class W2Summary(BaseModel):
    """W-2 boxes derived from a run's totals."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    tax_year: Optional[int] = None
    wages: Money = Field(..., description="Box 1: Wages, tips, other compensation")
    federal_tax_withheld: Money = Field(..., description="Box 2: Federal income tax withheld")
    ss_wages: Money = Field(..., description="Box 3: Social Security wages (capped)")
    ss_tax_withheld: Money = Field(..., description="Box 4: Social Security tax withheld")
    medicare_wages: Money = Field(..., description="Box 5: Medicare wages and tips")
    medicare_tax_withheld: Money = Field(..., description="Box 6: Medicare tax withheld")
    state_tax_withheld: Money = Field(..., description="Box 17: State income tax")

    def to_dict(self) -> dict:
        data = {"tax_year": self.tax_year}
        for name in W2Summary.model_fields:
            if name != "tax_year":
                data[name] = format_money(getattr(self, name))
        return data


def build_w2(summary: AnnualSummary, rules: TaxYearRules) -> W2Summary:
    """Build W-2 boxes from an annual summary.

    Gross pay is reported as both Box 1 and Box 5 wages (there are no
    pretax deductions in this model). Box 3 is gross capped at the SS
    wage base.

    Args:
        summary: Annual totals from summarize()
        rules: Tax rules for the summary's year (for the SS wage cap)
    """
    totals = summary.totals
    ss_wages: Decimal = min(totals.gross_pay, rules.social_security.wage_cap)

    return W2Summary(
        tax_year=summary.year,
        wages=totals.gross_pay,
        federal_tax_withheld=totals.federal_tax,
        ss_wages=ss_wages,
        ss_tax_withheld=totals.social_security,
        medicare_wages=totals.gross_pay,
        medicare_tax_withheld=totals.medicare,
        state_tax_withheld=totals.state_tax,
    )
