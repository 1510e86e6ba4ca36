"""Paystub CLI - Command-line interface for payroll runs and pay stubs."""

import csv
import io
import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path

import click
from rich import box
from rich.console import Console
from rich.table import Table

from paystub import __version__
from paystub.sdk import (
    EXPORT_COLUMNS,
    FilingStatus,
    PayFrequency,
    PayrollError,
    build_w2,
    generate_pay_dates,
    load_tax_table,
    parse_employee_profile,
    records_to_csv,
    records_to_dicts,
    run_payroll,
    summary_to_dict,
    write_records_csv,
    ytd_to_dict,
)
from paystub.sdk.config import OUTPUT_FORMATS, get_default_output_format, read_profile_file

from .renderers.stub_renderer import render_annual_summary, render_pay_stub, render_periods_table
from .settings_commands import settings as settings_group

# CLI flag -> EmployeeProfile field
PROFILE_FLAGS = {
    "rate": "hourly_rate",
    "hours": "hours_per_period",
    "overtime_hours": "overtime_hours",
    "overtime_rate": "overtime_rate",
    "filing_status": "filing_status",
    "frequency": "pay_frequency",
    "year": "year",
    "state_rate": "state_rate",
    "other_deductions": "other_deductions_per_period",
    "name": "employee_name",
    "employer": "employer_name",
}

FILING_STATUS_CHOICE = click.Choice([s.value for s in FilingStatus], case_sensitive=False)
FREQUENCY_CHOICE = click.Choice([f.value for f in PayFrequency], case_sensitive=False)

rules_dir_option = click.option(
    "--rules-dir", type=click.Path(file_okay=False),
    help="Directory of <year>.yaml tax rules overriding the bundled ones",
)


def profile_options(f):
    """Options that describe an employee (flags override --profile fields)."""
    options = [
        click.option("--profile", "-p", "profile_path", type=click.Path(dir_okay=False),
                     help="Employee profile YAML file"),
        click.option("--rate", help="Hourly rate (e.g., 30 or 42.50)"),
        click.option("--hours", help="Regular hours per period"),
        click.option("--overtime-hours", help="Overtime hours per period (default 0)"),
        click.option("--overtime-rate", help="Overtime hourly rate (default 1.5x rate)"),
        click.option("--filing-status", "-s", type=FILING_STATUS_CHOICE, help="Federal filing status"),
        click.option("--frequency", "-f", type=FREQUENCY_CHOICE, help="Pay frequency"),
        click.option("--year", "-y", type=int, help="Tax year"),
        click.option("--state-rate", help="Flat state withholding rate (e.g., 0.05)"),
        click.option("--other-deductions", help="Post-tax deductions per period"),
        click.option("--deduction", "deductions", multiple=True, metavar="NAME=AMOUNT",
                     help="Named post-tax deduction per period (repeatable)"),
        click.option("--name", help="Employee name (display only)"),
        click.option("--employer", help="Employer name (display only)"),
        rules_dir_option,
    ]
    for option in reversed(options):
        f = option(f)
    return f


format_option = click.option(
    "--format", "output_format", type=click.Choice(OUTPUT_FORMATS), default=None,
    help="Output format (default: settings default_output_format, else text)",
)


@contextmanager
def cli_errors():
    """Turn engine and file errors into a clean CLI failure."""
    try:
        yield
    except (PayrollError, FileNotFoundError) as e:
        raise click.ClickException(str(e)) from e


def _parse_deduction(text: str) -> dict:
    name, sep, amount = text.partition("=")
    if not sep or not name.strip():
        raise click.BadParameter(f"expected NAME=AMOUNT, got '{text}'", param_hint="--deduction")
    return {"name": name.strip(), "amount": amount.strip()}


def build_profile(profile_path=None, deductions=(), **flags):
    """Merge a profile file with CLI flags and validate the result."""
    data = read_profile_file(profile_path) if profile_path else {}
    for option, field in PROFILE_FLAGS.items():
        value = flags.get(option)
        if value is not None:
            data[field] = value
    if deductions:
        data["additional_deductions"] = [_parse_deduction(d) for d in deductions]
    return parse_employee_profile(data)


def _run(options: dict):
    """Load the table, validate the profile and run the year."""
    rules_dir = options.pop("rules_dir", None)
    with cli_errors():
        tax_table = load_tax_table(rules_dir)
        profile = build_profile(**options)
        return run_payroll(profile, tax_table), tax_table


def _resolve_format(output_format):
    return output_format or get_default_output_format()


def _echo_json(payload) -> None:
    click.echo(json.dumps(payload, indent=2))


def _pct(rate) -> str:
    # 0.062 -> "6.2%", 0.10 -> "10%"
    return f"{format((rate * 100).normalize(), 'f')}%"


@click.group()
@click.version_option(version=__version__, prog_name="paystub")
def cli():
    """Paystub - payroll tax calculation and pay-period projection.

    Runs a full year of pay periods for one employee: gross pay, federal
    income tax, Social Security, Medicare, state tax and YTD totals.

    An employee is described by a profile YAML (--profile) and/or flags:

    \b
      paystub run --rate 30 --hours 80 -s single -f biweekly -y 2024
      paystub stub 5 --profile me.yaml
      paystub summary --profile me.yaml --format json

    Settings are read from (in order):

    \b
    1. PAYSTUB_CONFIG_PATH environment variable
    2. ~/.config/paystub/settings.json (XDG default)
    """
    pass


cli.add_command(settings_group)


@cli.command("run")
@profile_options
@format_option
def run_cmd(output_format, **options):
    """Run payroll for every period of the year."""
    payroll, _ = _run(options)
    output_format = _resolve_format(output_format)

    if output_format == "json":
        _echo_json({
            "profile": payroll.profile.model_dump(mode="json"),
            "periods": records_to_dicts(payroll.records),
            "summary": summary_to_dict(payroll.summary),
        })
    elif output_format == "csv":
        click.echo(records_to_csv(payroll.records), nl=False)
    else:
        console = Console(width=140)
        profile = payroll.profile
        title = (
            f"{payroll.year} {profile.pay_frequency.value} payroll "
            f"({profile.filing_status.value})"
        )
        render_periods_table(console, payroll.records, title=title)
        render_annual_summary(console, payroll.summary)


@cli.command("stub")
@click.argument("period", type=int)
@profile_options
@format_option
def stub_cmd(period, output_format, **options):
    """Show the pay stub for one PERIOD (1-based), with YTD totals.

    \b
    Examples:
      paystub stub 1 --profile me.yaml
      paystub stub 26 --rate 30 --hours 80 -s single -f biweekly -y 2024
    """
    payroll, _ = _run(options)
    with cli_errors():
        record = payroll.get_period(period)
    ytd = payroll.ytd_through(period)
    output_format = _resolve_format(output_format)

    if output_format == "json":
        _echo_json({
            "period": records_to_dicts([record])[0],
            "ytd": ytd_to_dict(ytd),
        })
    elif output_format == "csv":
        click.echo(records_to_csv([record]), nl=False)
    else:
        render_pay_stub(Console(), record, ytd, payroll.profile)


@cli.command("summary")
@profile_options
@format_option
def summary_cmd(output_format, **options):
    """Show annual totals and the W-2 boxes for the year."""
    payroll, tax_table = _run(options)
    summary = payroll.summary
    w2 = build_w2(summary, tax_table.rules_for(payroll.year))
    output_format = _resolve_format(output_format)

    if output_format == "json":
        payload = summary_to_dict(summary)
        payload["w2"] = w2.to_dict()
        _echo_json(payload)
    elif output_format == "csv":
        totals = ytd_to_dict(summary.totals)
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["year", "period_count"] + list(totals))
        writer.writerow([summary.year, summary.period_count] + list(totals.values()))
        click.echo(buffer.getvalue(), nl=False)
    else:
        render_annual_summary(Console(), summary, w2)


@cli.command("export")
@profile_options
@click.option("--output", "-o", "output_path", type=click.Path(dir_okay=False),
              help="Write CSV to this file (default: stdout)")
def export_cmd(output_path, **options):
    """Export every period as CSV.

    Columns: period, pay_date, hours, gross_pay, federal_tax,
    social_security, medicare, state_tax, other_deductions, net_pay.
    """
    payroll, _ = _run(options)

    if output_path is None:
        click.echo(records_to_csv(payroll.records), nl=False)
        return

    path = write_records_csv(payroll.records, Path(output_path))
    click.echo(f"Wrote {len(payroll.records)} periods to {path}", err=True)


@cli.command("calendar")
@click.option("--year", "-y", type=int, required=True, help="Calendar year")
@click.option("--frequency", "-f", type=FREQUENCY_CHOICE, default="biweekly", show_default=True,
              help="Pay frequency")
@rules_dir_option
@format_option
def calendar_cmd(year, frequency, rules_dir, output_format):
    """List the pay dates for a year and frequency."""
    with cli_errors():
        dates = generate_pay_dates(year, PayFrequency(frequency.lower()), load_tax_table(rules_dir))
    output_format = _resolve_format(output_format)

    if output_format == "json":
        _echo_json([d.isoformat() for d in dates])
    elif output_format == "csv":
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(EXPORT_COLUMNS[:2])
        writer.writerows([i, d.isoformat()] for i, d in enumerate(dates, start=1))
        click.echo(buffer.getvalue(), nl=False)
    else:
        table = Table(title=f"{year} {frequency.lower()} pay dates ({len(dates)})", box=box.SIMPLE)
        table.add_column("#", justify="right")
        table.add_column("Pay Date")
        table.add_column("Day", style="dim")
        for i, d in enumerate(dates, start=1):
            table.add_row(str(i), d.isoformat(), d.strftime("%a"))
        Console().print(table)


@cli.command("tables")
@click.option("--year", "-y", type=int, help="Show the rules for this year")
@click.option("--filing-status", "-s", type=FILING_STATUS_CHOICE, default="single", show_default=True)
@rules_dir_option
@format_option
def tables_cmd(year, filing_status, rules_dir, output_format):
    """List supported tax years, or show one year's rules.

    \b
    Examples:
      paystub tables
      paystub tables --year 2024 -s mfj
    """
    with cli_errors():
        tax_table = load_tax_table(rules_dir)
        if year is None:
            rules = None
        else:
            rules = tax_table.lookup(year, FilingStatus(filing_status.lower()))
    output_format = _resolve_format(output_format)

    if rules is None:
        if output_format == "json":
            _echo_json({"years": tax_table.years})
        else:
            click.echo(f"Tax rules available for: {', '.join(str(y) for y in tax_table.years)}")
        return

    brackets = [
        {"up_to": None if b.up_to is None else str(b.up_to), "rate": str(b.rate)}
        for b in rules.brackets
    ]
    if output_format == "json":
        _echo_json({
            "year": rules.year,
            "filing_status": rules.filing_status.value,
            "social_security": {"wage_cap": str(rules.ss_wage_cap), "tax_rate": str(rules.ss_rate)},
            "medicare": {
                "tax_rate": str(rules.medicare_rate),
                "additional_rate": str(rules.additional_medicare_rate),
                "additional_threshold": str(rules.additional_medicare_threshold),
            },
            "federal_brackets": brackets,
        })
        return

    console = Console()
    console.print(f"[bold]{rules.year} tax rules ({rules.filing_status.value})[/bold]")
    console.print(f"Social Security: {_pct(rules.ss_rate)} up to ${rules.ss_wage_cap:,.2f}")
    console.print(
        f"Medicare: {_pct(rules.medicare_rate)} "
        f"+ {_pct(rules.additional_medicare_rate)} over ${rules.additional_medicare_threshold:,.2f}"
    )
    table = Table(title="Federal Brackets (annual)", box=box.ROUNDED)
    table.add_column("Over", justify="right")
    table.add_column("Up To", justify="right")
    table.add_column("Rate", justify="right")
    previous = None
    for bracket in rules.brackets:
        table.add_row(
            f"${previous:,.0f}" if previous is not None else "$0",
            f"${bracket.up_to:,.0f}" if bracket.up_to is not None else "-",
            _pct(bracket.rate),
        )
        previous = bracket.up_to
    console.print(table)


def main():
    """Entry point for the CLI."""
    log_level = os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    cli()


if __name__ == "__main__":
    main()
