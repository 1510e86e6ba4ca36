"""Rich renderers for pay stubs, period tables and annual summaries.

Transforms SDK models into formatted Rich tables.
"""

from decimal import Decimal
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from paystub.sdk.schemas import AnnualSummary, EmployeeProfile, PayPeriodRecord, YTDAccumulator
from paystub.sdk.summary import format_hours
from paystub.sdk.w2 import W2Summary


def render_pay_stub(
    console: Console,
    record: PayPeriodRecord,
    ytd: YTDAccumulator,
    profile: Optional[EmployeeProfile] = None,
) -> None:
    """Render one period as a pay stub with Current and YTD columns.

    Args:
        console: Rich Console instance
        record: The period to show
        ytd: Totals through the end of that period
        profile: Optional profile for the header (name, employer)
    """
    title = f"Pay Stub: {record.pay_date.isoformat()} - Period {record.period_index}"
    if profile is not None and profile.employee_name:
        title += f" ({profile.employee_name})"

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("", style="bold", min_width=25)
    table.add_column("Current", justify="right", min_width=12)
    table.add_column("YTD", justify="right", min_width=12)

    if profile is not None and profile.employer_name:
        table.add_row("[dim]Employer[/dim]", f"[dim]{profile.employer_name}[/dim]", "")
        table.add_row("", "", "")

    # Earnings
    table.add_row("[bold]EARNINGS[/bold]", "", "")
    table.add_row("  Hours", format_hours(record.hours), format_hours(ytd.hours))
    table.add_row("  Gross Pay", _fmt(record.gross_pay), _fmt(ytd.gross_pay))
    table.add_row("", "", "")

    # Taxes
    table.add_row("[bold]TAXES[/bold]", "", "")
    table.add_row("  Federal Income Tax", _fmt(record.federal_tax), _fmt(ytd.federal_tax))
    table.add_row("  Social Security", _fmt(record.social_security), _fmt(ytd.social_security))
    table.add_row("  Medicare", _fmt(record.medicare), _fmt(ytd.medicare))
    table.add_row("  State Income Tax", _fmt(record.state_tax), _fmt(ytd.state_tax))
    table.add_row(
        "  [dim]Total Taxes[/dim]",
        f"[dim]{_fmt(record.total_taxes)}[/dim]",
        f"[dim]{_fmt(ytd.federal_tax + ytd.social_security + ytd.medicare + ytd.state_tax)}[/dim]",
    )
    table.add_row("", "", "")

    # Post-tax deductions
    table.add_row("[bold]DEDUCTIONS[/bold]", "", "")
    if profile is not None and profile.additional_deductions:
        if profile.other_deductions_per_period:
            table.add_row("  Other", _fmt(profile.other_deductions_per_period), "")
        for deduction in profile.additional_deductions:
            table.add_row(f"  {deduction.name}", _fmt(deduction.amount), "")
    table.add_row("  Total Deductions", _fmt(record.other_deductions), _fmt(ytd.other_deductions))
    table.add_row("", "", "")

    net_style = "bold green" if record.net_pay >= 0 else "bold red"
    table.add_row(
        f"[{net_style}]NET PAY[/{net_style}]",
        f"[{net_style}]{_fmt(record.net_pay)}[/{net_style}]",
        _fmt(ytd.net_pay),
    )

    console.print(table)


def render_periods_table(
    console: Console,
    records: Sequence[PayPeriodRecord],
    title: str = "Pay Periods",
) -> None:
    """Render every period of a run as one row each."""
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right")
    table.add_column("Pay Date")
    table.add_column("Hours", justify="right")
    table.add_column("Gross", justify="right")
    table.add_column("Federal", justify="right")
    table.add_column("SS", justify="right")
    table.add_column("Medicare", justify="right")
    table.add_column("State", justify="right")
    table.add_column("Other", justify="right")
    table.add_column("Net", justify="right", style="green")

    for record in records:
        table.add_row(
            str(record.period_index),
            record.pay_date.isoformat(),
            format_hours(record.hours),
            _fmt(record.gross_pay),
            _fmt(record.federal_tax),
            _fmt(record.social_security),
            _fmt(record.medicare),
            _fmt(record.state_tax),
            _fmt(record.other_deductions),
            _fmt(record.net_pay),
        )

    console.print(table)


def render_annual_summary(
    console: Console,
    summary: AnnualSummary,
    w2: Optional[W2Summary] = None,
) -> None:
    """Render annual totals, followed by W-2 boxes when given."""
    totals = summary.totals
    year = summary.year if summary.year is not None else "?"

    table = Table(title=f"Annual Summary: {year} ({summary.period_count} periods)", box=box.ROUNDED)
    table.add_column("", style="bold", min_width=25)
    table.add_column("Total", justify="right", min_width=14)

    table.add_row("Hours", format_hours(totals.hours))
    table.add_row("Gross Pay", _fmt(totals.gross_pay))
    table.add_row("Federal Income Tax", _fmt(totals.federal_tax))
    table.add_row("Social Security", _fmt(totals.social_security))
    table.add_row("Medicare", _fmt(totals.medicare))
    table.add_row("State Income Tax", _fmt(totals.state_tax))
    table.add_row("Other Deductions", _fmt(totals.other_deductions))
    table.add_row("[bold green]Net Pay[/bold green]", f"[bold green]{_fmt(totals.net_pay)}[/bold green]")

    console.print(table)

    if w2 is not None:
        _render_w2(console, w2)


def _render_w2(console: Console, w2: W2Summary) -> None:
    table = Table(title=f"W-2: {w2.tax_year}", box=box.ROUNDED)
    table.add_column("Box", justify="right", style="dim")
    table.add_column("", min_width=30)
    table.add_column("Amount", justify="right", min_width=14)

    table.add_row("1", "Wages, tips, other compensation", _fmt(w2.wages))
    table.add_row("2", "Federal income tax withheld", _fmt(w2.federal_tax_withheld))
    table.add_row("3", "Social security wages", _fmt(w2.ss_wages))
    table.add_row("4", "Social security tax withheld", _fmt(w2.ss_tax_withheld))
    table.add_row("5", "Medicare wages and tips", _fmt(w2.medicare_wages))
    table.add_row("6", "Medicare tax withheld", _fmt(w2.medicare_tax_withheld))
    table.add_row("17", "State income tax", _fmt(w2.state_tax_withheld))

    console.print(table)


def _fmt(amount: Optional[Decimal]) -> str:
    """Format currency amount."""
    if amount is None:
        return "-"
    if amount < 0:
        return f"-${-amount:,.2f}"
    return f"${amount:,.2f}"
