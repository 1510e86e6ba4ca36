"""Tests for the payroll run aggregator.

Covers the reference scenario ($30/h x 80h biweekly single 2024), the
period fold invariants, wage cap and threshold crossings, and how
failures are reported.
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from paystub.sdk import (
    EmployeeProfile,
    InvalidInputError,
    PayPeriodRecord,
    PayrollError,
    RunContext,
    UnsupportedYearError,
    YTDAccumulator,
    apply_period,
    flat_state_tax,
    parse_employee_profile,
    run_payroll,
)

D = Decimal


# === FIXTURES ===

@pytest.fixture
def high_earner(profile_data):
    """$105/h x 80h: crosses the SS cap in period 20, Additional Medicare in period 24."""
    return parse_employee_profile(profile_data(hourly_rate=105))


# === REFERENCE SCENARIO ===

class TestReferenceScenario:

    def test_every_period(self, base_profile, tax_table):
        run = run_payroll(base_profile, tax_table)

        assert len(run.records) == 26
        for record in run.records:
            assert record.gross_pay == D("2400.00")
            assert record.federal_tax == D("347.52")
            assert record.social_security == D("148.80")
            assert record.medicare == D("34.80")
            assert record.state_tax == D("0.00")
            assert record.other_deductions == D("0.00")
            assert record.net_pay == D("1868.88")
            assert record.hours == D("80")

    def test_annual_totals(self, base_profile, tax_table):
        run = run_payroll(base_profile, tax_table)

        assert run.ytd.gross_pay == D("62400.00")
        assert run.ytd.federal_tax == D("9035.52")
        assert run.ytd.social_security == D("3868.80")
        assert run.ytd.medicare == D("904.80")
        assert run.ytd.net_pay == D("48590.88")
        assert run.ytd.hours == D("2080")

        summary = run.summary
        assert summary.year == 2024
        assert summary.period_count == 26
        assert summary.totals == run.ytd

    def test_periods_follow_calendar(self, base_profile, tax_table):
        run = run_payroll(base_profile, tax_table)
        assert [r.period_index for r in run.records] == list(range(1, 27))
        assert run.records[0].pay_date.isoformat() == "2024-01-12"
        assert run.records[-1].pay_date.isoformat() == "2024-12-27"

    def test_accepts_raw_profile_dict(self, profile_data, tax_table):
        run = run_payroll(profile_data(), tax_table)
        assert run.ytd.gross_pay == D("62400.00")


# === INVARIANTS ===

@pytest.mark.parametrize("frequency,count", [
    ("weekly", 52), ("biweekly", 26), ("semimonthly", 24), ("monthly", 12),
])
def test_period_count_matches_frequency(profile_data, tax_table, frequency, count):
    run = run_payroll(profile_data(pay_frequency=frequency), tax_table)
    assert len(run.records) == count


@pytest.mark.parametrize("rate,status", [
    (12, "single"), (30, "mfj"), (77.77, "hoh"), (105, "mfs"), (240, "qss"),
])
def test_net_pay_identity(profile_data, tax_table, rate, status):
    profile = profile_data(
        hourly_rate=rate, filing_status=status, overtime_hours=6,
        state_rate=0.0425, other_deductions_per_period=35,
    )
    for record in run_payroll(profile, tax_table).records:
        deductions = (
            record.federal_tax + record.social_security + record.medicare
            + record.state_tax + record.other_deductions
        )
        assert record.net_pay == record.gross_pay - deductions


def test_ytd_is_non_decreasing(high_earner, tax_table):
    run = run_payroll(high_earner, tax_table)
    previous = YTDAccumulator.zero()
    for i in range(1, len(run.records) + 1):
        current = run.ytd_through(i)
        assert current.gross_pay > previous.gross_pay
        assert current.social_security >= previous.social_security
        assert current.medicare > previous.medicare
        previous = current
    assert previous == run.ytd


def test_deterministic(high_earner, tax_table):
    assert run_payroll(high_earner, tax_table).records == run_payroll(high_earner, tax_table).records


def test_record_rejects_broken_net_pay():
    with pytest.raises(ValidationError, match="net_pay"):
        PayPeriodRecord(
            period_index=1, pay_date="2024-01-12", hours=80, gross_pay="2400.00",
            federal_tax="347.52", social_security="148.80", medicare="34.80",
            state_tax=0, other_deductions=0, net_pay="1868.89",
        )


def test_negative_net_pay_is_allowed(profile_data, tax_table):
    run = run_payroll(profile_data(other_deductions_per_period=5000), tax_table)
    assert run.records[0].net_pay < 0


# === SOCIAL SECURITY AND MEDICARE ACROSS THE YEAR ===

def test_ss_stops_at_wage_cap(high_earner, tax_table):
    records = run_payroll(high_earner, tax_table).records

    assert all(r.social_security == D("520.80") for r in records[:19])
    assert records[19].social_security == D("37.20")
    assert all(r.social_security == D("0.00") for r in records[20:])
    assert sum(r.social_security for r in records) == D("9932.40")


def test_ss_exact_cap_landing(profile_data, tax_table):
    # 8,000 x 20 = 160,000; period 21 has 200 of headroom
    records = run_payroll(profile_data(hourly_rate=100), tax_table).records
    assert records[19].social_security == D("496.00")
    assert records[20].social_security == D("12.40")
    assert records[21].social_security == D("0.00")
    assert records[0].federal_tax == D("1746.00")


def test_additional_medicare_crossing(high_earner, tax_table):
    records = run_payroll(high_earner, tax_table).records

    assert all(r.medicare == D("121.80") for r in records[:23])
    assert records[23].medicare == D("136.20")
    assert all(r.medicare == D("197.40") for r in records[24:])


def test_mfj_threshold_not_reached(profile_data, tax_table):
    records = run_payroll(profile_data(hourly_rate=105, filing_status="mfj"), tax_table).records
    assert all(r.medicare == D("121.80") for r in records)


# === INPUT VARIANTS ===

def test_overtime_and_deductions(profile_data, tax_table):
    profile = profile_data(
        hourly_rate=20, overtime_hours=10, other_deductions_per_period=25,
        additional_deductions=[{"name": "Union dues", "amount": "15.50"}],
    )
    record = run_payroll(profile, tax_table).records[0]
    assert record.gross_pay == D("1900.00")
    assert record.hours == D("90")
    assert record.other_deductions == D("40.50")


def test_flat_state_rate(profile_data, tax_table):
    record = run_payroll(profile_data(state_rate=0.05), tax_table).records[0]
    assert record.state_tax == D("120.00")
    assert record.net_pay == D("1748.88")


def test_state_tax_callable_sees_ytd_before(base_profile, tax_table):
    seen = []

    def state_tax(gross, ytd_before):
        seen.append(ytd_before)
        return gross * D("0.01")

    run = run_payroll(base_profile, tax_table, state_tax=state_tax)
    assert seen[:3] == [D("0.00"), D("2400.00"), D("4800.00")]
    assert run.records[0].state_tax == D("24.00")


def test_apply_period_does_not_mutate_accumulator(base_profile, tax_table):
    context = RunContext(
        profile=base_profile,
        rules=tax_table.lookup(2024, base_profile.filing_status),
        state_tax=flat_state_tax(D("0")),
    )
    start = YTDAccumulator.zero()
    ytd, record = apply_period(start, context, 1, date(2024, 1, 12))
    assert start == YTDAccumulator.zero()
    assert ytd.gross_pay == record.gross_pay == D("2400.00")


# === FAILURES ===

class TestFailures:

    def test_invalid_profile_fails_before_any_period(self, profile_data, tax_table):
        with pytest.raises(InvalidInputError) as exc_info:
            run_payroll(profile_data(hourly_rate=-5), tax_table)
        assert exc_info.value.period_index is None
        assert exc_info.value.last_completed_period is None

    def test_unknown_field_is_rejected(self, profile_data):
        with pytest.raises(InvalidInputError, match="hourly_rat"):
            parse_employee_profile(profile_data(hourly_rat=30))

    def test_missing_field(self, profile_data):
        data = profile_data()
        del data["filing_status"]
        with pytest.raises(InvalidInputError, match="filing_status"):
            parse_employee_profile(data)

    def test_unrepresentable_gross_fails_before_any_period(self, profile_data, tax_table):
        with pytest.raises(InvalidInputError, match="not representable") as exc_info:
            run_payroll(profile_data(hourly_rate="1e999999"), tax_table)
        assert exc_info.value.period_index is None
        assert exc_info.value.last_completed_period is None

    def test_unsupported_year_fails_before_any_period(self, profile_data, tax_table):
        with pytest.raises(UnsupportedYearError) as exc_info:
            run_payroll(profile_data(year=2019), tax_table)
        assert exc_info.value.period_index is None

    def test_failure_in_period_reports_position(self, base_profile, tax_table):
        def state_tax(gross, ytd_before):
            if ytd_before >= D("4800"):
                raise InvalidInputError("state rate lookup failed")
            return D("0")

        with pytest.raises(InvalidInputError) as exc_info:
            run_payroll(base_profile, tax_table, state_tax=state_tax)

        error = exc_info.value
        assert error.period_index == 3
        assert error.last_completed_period == 2
        assert "period 3" in str(error)
        assert isinstance(error.__cause__, InvalidInputError)
        assert error.__cause__.period_index is None

    def test_arithmetic_failure_in_period(self, base_profile, tax_table):
        def state_tax(gross, ytd_before):
            return gross / (ytd_before - ytd_before)

        with pytest.raises(PayrollError) as exc_info:
            run_payroll(base_profile, tax_table, state_tax=state_tax)

        assert isinstance(exc_info.value, InvalidInputError)
        assert exc_info.value.period_index == 1
        assert exc_info.value.last_completed_period == 0

    def test_negative_state_tax(self, base_profile, tax_table):
        with pytest.raises(InvalidInputError, match="negative") as exc_info:
            run_payroll(base_profile, tax_table, state_tax=lambda gross, ytd: D("-1"))
        assert exc_info.value.period_index == 1

    def test_get_period_out_of_range(self, base_profile, tax_table):
        run = run_payroll(base_profile, tax_table)
        assert run.get_period(26).pay_date.isoformat() == "2024-12-27"
        with pytest.raises(InvalidInputError):
            run.get_period(0)
        with pytest.raises(InvalidInputError):
            run.get_period(27)


def test_profile_is_frozen(base_profile):
    with pytest.raises(ValidationError):
        base_profile.hourly_rate = D("31")
    assert isinstance(base_profile, EmployeeProfile)
