"""Paystub MCP Server - FastMCP implementation for payroll tools."""

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from paystub.sdk import (
    PayrollError,
    build_w2,
    load_tax_table,
    parse_employee_profile,
    records_to_dicts,
    run_payroll as sdk_run_payroll,
    summary_to_dict,
    ytd_to_dict,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("paystub")

PROFILE_DESCRIPTION = (
    "Employee profile: hourly_rate, hours_per_period, filing_status "
    "(single/mfj/mfs/hoh/qss), pay_frequency (weekly/biweekly/semimonthly/monthly), "
    "year; optional overtime_hours, overtime_rate, state_rate, "
    "other_deductions_per_period, additional_deductions [{name, amount}]"
)


def _run(profile: dict, rules_dir: str | None):
    tax_table = load_tax_table(rules_dir)
    return sdk_run_payroll(parse_employee_profile(profile), tax_table), tax_table


def _error(e: Exception) -> dict[str, Any]:
    result = {"error": str(e)}
    period_index = getattr(e, "period_index", None)
    if period_index is not None:
        result["period_index"] = period_index
        result["last_completed_period"] = e.last_completed_period
    return result


# --- Tools ---

@mcp.tool()
async def run_payroll(
    profile: dict[str, Any] = Field(description=PROFILE_DESCRIPTION),
    rules_dir: str | None = Field(default=None, description="Directory of <year>.yaml tax rule overrides"),
) -> dict[str, Any]:
    """Run payroll for every pay period of the profile's year. Returns each period's gross, taxes, deductions and net pay, plus annual totals."""
    try:
        payroll, _ = _run(profile, rules_dir)
        return {
            "year": payroll.year,
            "periods": records_to_dicts(payroll.records),
            "summary": summary_to_dict(payroll.summary),
        }
    except (PayrollError, FileNotFoundError) as e:
        logger.warning(f"run_payroll failed: {e}")
        return _error(e)


@mcp.tool()
async def get_pay_stub(
    profile: dict[str, Any] = Field(description=PROFILE_DESCRIPTION),
    period: int = Field(description="1-based pay period number"),
    rules_dir: str | None = Field(default=None, description="Directory of <year>.yaml tax rule overrides"),
) -> dict[str, Any]:
    """Get one pay period's stub with year-to-date totals through that period."""
    try:
        payroll, _ = _run(profile, rules_dir)
        record = payroll.get_period(period)
        return {
            "period": records_to_dicts([record])[0],
            "ytd": ytd_to_dict(payroll.ytd_through(period)),
        }
    except (PayrollError, FileNotFoundError) as e:
        logger.warning(f"get_pay_stub failed: {e}")
        return _error(e)


@mcp.tool()
async def get_annual_summary(
    profile: dict[str, Any] = Field(description=PROFILE_DESCRIPTION),
    rules_dir: str | None = Field(default=None, description="Directory of <year>.yaml tax rule overrides"),
) -> dict[str, Any]:
    """Get annual totals and W-2 boxes (wages, federal, Social Security, Medicare, state) for the year."""
    try:
        payroll, tax_table = _run(profile, rules_dir)
        result = summary_to_dict(payroll.summary)
        result["w2"] = build_w2(payroll.summary, tax_table.rules_for(payroll.year)).to_dict()
        return result
    except (PayrollError, FileNotFoundError) as e:
        logger.warning(f"get_annual_summary failed: {e}")
        return _error(e)


@mcp.tool()
async def list_tax_years(
    rules_dir: str | None = Field(default=None, description="Directory of <year>.yaml tax rule overrides"),
) -> dict[str, Any]:
    """List the tax years with payroll tax rules available."""
    try:
        return {"years": load_tax_table(rules_dir).years}
    except (PayrollError, FileNotFoundError) as e:
        return _error(e)


def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
