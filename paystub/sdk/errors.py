"""Error kinds raised by the payroll engine.

Every failure is a deterministic function of the inputs, so nothing here is
retried. Callers either fix the input or supply the missing year data.
"""

import copy
from typing import Iterable, Optional


class PayrollError(Exception):
    """Base class for payroll engine errors.

    Errors raised while a run is in progress carry the period that failed
    and the last period that completed successfully.
    """

    def __init__(
        self,
        message: str,
        period_index: Optional[int] = None,
        last_completed_period: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.period_index = period_index
        self.last_completed_period = last_completed_period

    def at_period(self, period_index: int) -> "PayrollError":
        """Copy of this error, same kind, tagged with the period that failed."""
        error = copy.copy(self)
        error.message = f"period {period_index}: {self.message}"
        error.args = (error.message,)
        error.period_index = period_index
        error.last_completed_period = period_index - 1
        return error


class UnsupportedYearError(PayrollError):
    """Raised when no tax rules or pay calendar exist for a year."""

    def __init__(self, message: str, year: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.year = year

    @classmethod
    def for_year(cls, year: int, available: Iterable[int] = ()) -> "UnsupportedYearError":
        available = list(available)
        message = f"No tax rules for year {year}"
        if available:
            message += f" (available: {', '.join(str(y) for y in available)})"
        return cls(message, year=year)


class InvalidInputError(PayrollError):
    """Raised for negative, non-finite or otherwise invalid inputs."""
    pass


class ConfigurationDriftError(PayrollError):
    """Raised when tax rules or calendars break an internal invariant.

    A bracket ladder that is not increasing or does not end unbounded, or a
    calendar with the wrong number of dates, is a data bug and must not be
    tolerated.
    """
    pass
