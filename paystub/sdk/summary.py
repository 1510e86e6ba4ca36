"""Annual summary and tabular export of period records.

Both are pure reductions over the records: no tax logic is recomputed and
values are written exactly as the run produced them.
"""

import csv
import io
from pathlib import Path
from typing import Optional, Sequence

from .money import format_money
from .schemas import YTD_FIELDS, AnnualSummary, EmployeeProfile, PayPeriodRecord, YTDAccumulator

# Fixed column order for CSV/report consumers
EXPORT_COLUMNS = [
    "period",
    "pay_date",
    "hours",
    "gross_pay",
    "federal_tax",
    "social_security",
    "medicare",
    "state_tax",
    "other_deductions",
    "net_pay",
]

_MONEY_FIELDS = EXPORT_COLUMNS[3:]


def summarize(
    records: Sequence[PayPeriodRecord],
    profile: Optional[EmployeeProfile] = None,
) -> AnnualSummary:
    """Sum every numeric field across the period records.

    Args:
        records: Period records from a run, in order
        profile: Profile the run was made for (year is taken from it when given)

    Returns:
        AnnualSummary with totals and period count
    """
    totals = YTDAccumulator.zero()
    for record in records:
        totals = totals.add(record)

    if profile is not None:
        year = profile.year
    elif records:
        year = records[0].pay_date.year
    else:
        year = None

    return AnnualSummary(
        year=year,
        period_count=len(records),
        totals=totals,
        profile=profile,
    )


def format_hours(hours) -> str:
    # 80 -> "80", 37.50 -> "37.5"
    return format(hours.normalize(), "f")


def export_rows(records: Sequence[PayPeriodRecord]) -> list[list[str]]:
    """Flatten records to rows of strings in EXPORT_COLUMNS order.

    Money has two fraction digits, dates are YYYY-MM-DD.
    """
    rows = []
    for record in records:
        row = [
            str(record.period_index),
            record.pay_date.isoformat(),
            format_hours(record.hours),
        ]
        row.extend(format_money(getattr(record, name)) for name in _MONEY_FIELDS)
        rows.append(row)
    return rows


def _write_rows(writer, records: Sequence[PayPeriodRecord]) -> None:
    writer.writerow(EXPORT_COLUMNS)
    writer.writerows(export_rows(records))


def records_to_csv(records: Sequence[PayPeriodRecord]) -> str:
    """Serialize records to CSV text with a header row."""
    buffer = io.StringIO()
    _write_rows(csv.writer(buffer, lineterminator="\n"), records)
    return buffer.getvalue()


def write_records_csv(records: Sequence[PayPeriodRecord], output_path: Path) -> Path:
    """Write records to a CSV file.

    Args:
        records: Period records from a run
        output_path: Path to output CSV file

    Returns:
        Path to the written file
    """
    output_path = Path(output_path)
    with open(output_path, "w", newline="") as csvfile:
        writer = csv.writer(csvfile, lineterminator="\n")
        _write_rows(writer, records)

    return output_path


def ytd_to_dict(ytd: YTDAccumulator) -> dict:
    """JSON-friendly totals: money as two-digit strings."""
    data = {"hours": format_hours(ytd.hours)}
    for name in YTD_FIELDS[1:]:
        data[name] = format_money(getattr(ytd, name))
    return data


def summary_to_dict(summary: AnnualSummary) -> dict:
    return {
        "year": summary.year,
        "period_count": summary.period_count,
        "totals": ytd_to_dict(summary.totals),
    }


def records_to_dicts(records: Sequence[PayPeriodRecord]) -> list[dict]:
    """JSON-friendly records, keyed by EXPORT_COLUMNS."""
    return [dict(zip(EXPORT_COLUMNS, row)) for row in export_rows(records)]
