"""Pydantic schemas for payroll inputs and outputs.

All schemas use extra='forbid' to reject unknown fields, ensuring
typos in profile files cause clear errors rather than silent ignoring.
Models are frozen: a record, once produced, is never mutated.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from .money import ZERO, Money, Rate, to_decimal

Hours = Annotated[Decimal, BeforeValidator(to_decimal)]


# =============================================================================
# Enumerations
# =============================================================================


class FilingStatus(str, Enum):
    """Federal filing status. Selects bracket ladder and Medicare threshold."""

    SINGLE = "single"
    MFJ = "mfj"
    MFS = "mfs"
    HOH = "hoh"
    QSS = "qss"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_").replace(" ", "_")
            key = _FILING_STATUS_ALIASES.get(key, key)
            if key in cls._value2member_map_:
                return cls(key)
        return None


_FILING_STATUS_ALIASES = {
    "married_filing_jointly": "mfj",
    "marriedjoint": "mfj",
    "married_joint": "mfj",
    "married_filing_separately": "mfs",
    "marriedseparate": "mfs",
    "married_separate": "mfs",
    "head_of_household": "hoh",
    "headofhousehold": "hoh",
    "qualifying_surviving_spouse": "qss",
    "qualifyingsurvivingspouse": "qss",
}


class PayFrequency(str, Enum):
    """Payroll cadence."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMIMONTHLY = "semimonthly"
    MONTHLY = "monthly"

    @property
    def periods_per_year(self) -> int:
        return PAY_PERIODS[self]


# Pay periods by frequency. Drives both the calendar and the annualization
# used for bracket lookup.
PAY_PERIODS = {
    PayFrequency.WEEKLY: 52,
    PayFrequency.BIWEEKLY: 26,
    PayFrequency.SEMIMONTHLY: 24,
    PayFrequency.MONTHLY: 12,
}


# =============================================================================
# Input
# =============================================================================


def _coerce_filing_status(value):
    # Accepts aliases such as "married-filing-jointly" or "headOfHousehold"
    if isinstance(value, str):
        return FilingStatus(value)
    return value


class NamedDeduction(BaseModel):
    """A named post-tax deduction taken every period (e.g., 'Union dues')."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1, max_length=100)
    amount: Money = Field(..., ge=0, description="Amount per period")


class EmployeeProfile(BaseModel):
    """Inputs for one payroll run. Immutable for the duration of the run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    hourly_rate: Money = Field(..., ge=0, description="Regular hourly rate")
    hours_per_period: Hours = Field(..., ge=0, description="Regular hours each period")
    overtime_hours: Hours = Field(default=ZERO, ge=0, description="Overtime hours each period")
    overtime_rate: Optional[Money] = Field(
        default=None, ge=0, description="Overtime hourly rate (default 1.5x hourly_rate)"
    )
    filing_status: Annotated[FilingStatus, BeforeValidator(_coerce_filing_status)]
    state_rate: Rate = Field(
        default=ZERO, ge=0, le=1,
        description="Flat state withholding rate, resolved by the caller",
    )
    other_deductions_per_period: Money = Field(default=ZERO, ge=0)
    additional_deductions: tuple[NamedDeduction, ...] = Field(
        default=(), description="Named deductions, added to other_deductions_per_period"
    )
    pay_frequency: PayFrequency
    year: int = Field(..., ge=1900, le=9999)

    # Display-only fields, never used in calculations
    employee_name: Optional[str] = Field(default=None, max_length=100)
    employee_id: Optional[str] = None
    employer_name: Optional[str] = Field(default=None, max_length=200)
    state: Optional[str] = Field(default=None, description="State code for display")

    @property
    def total_other_deductions(self) -> Decimal:
        return self.other_deductions_per_period + sum(
            (d.amount for d in self.additional_deductions), ZERO
        )

    @property
    def periods_per_year(self) -> int:
        return self.pay_frequency.periods_per_year


# =============================================================================
# Output
# =============================================================================


class PayPeriodRecord(BaseModel):
    """One pay period. Net pay always equals gross minus every deduction.

    Negative net pay is allowed: it points at misconfigured inputs
    (e.g., deductions larger than gross), not at a calculation bug.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    period_index: int = Field(..., ge=1, description="1-based period number")
    pay_date: date
    hours: Hours = Field(..., description="Regular plus overtime hours")
    gross_pay: Money
    federal_tax: Money
    social_security: Money
    medicare: Money
    state_tax: Money
    other_deductions: Money
    net_pay: Money

    @property
    def total_taxes(self) -> Decimal:
        return self.federal_tax + self.social_security + self.medicare + self.state_tax

    @property
    def total_deductions(self) -> Decimal:
        return self.total_taxes + self.other_deductions

    @model_validator(mode="after")
    def check_net_pay(self) -> "PayPeriodRecord":
        expected = self.gross_pay - self.total_deductions
        if self.net_pay != expected:
            raise ValueError(
                f"net_pay ({self.net_pay}) != gross - deductions ({expected})"
            )
        return self


YTD_FIELDS = (
    "hours",
    "gross_pay",
    "federal_tax",
    "social_security",
    "medicare",
    "state_tax",
    "other_deductions",
    "net_pay",
)


class YTDAccumulator(BaseModel):
    """Year-to-date totals. Each add() returns a new accumulator."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    hours: Hours = ZERO
    gross_pay: Money = ZERO
    federal_tax: Money = ZERO
    social_security: Money = ZERO
    medicare: Money = ZERO
    state_tax: Money = ZERO
    other_deductions: Money = ZERO
    net_pay: Money = ZERO

    @classmethod
    def zero(cls) -> "YTDAccumulator":
        return cls()

    def add(self, record: PayPeriodRecord) -> "YTDAccumulator":
        return YTDAccumulator(
            **{name: getattr(self, name) + getattr(record, name) for name in YTD_FIELDS}
        )


class AnnualSummary(BaseModel):
    """Totals for a full run, reduced from its period records."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    year: Optional[int] = None
    period_count: int = Field(..., ge=0)
    totals: YTDAccumulator
    profile: Optional[EmployeeProfile] = None
