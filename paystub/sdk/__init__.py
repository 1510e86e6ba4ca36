"""Paystub SDK - Core payroll tax calculation and pay-period projection."""

from .errors import (
    PayrollError,
    UnsupportedYearError,
    InvalidInputError,
    ConfigurationDriftError,
)

from .money import (
    ZERO,
    Money,
    Rate,
    to_decimal,
    round_cents,
    format_money,
)

from .schemas import (
    FilingStatus,
    PayFrequency,
    PAY_PERIODS,
    NamedDeduction,
    EmployeeProfile,
    PayPeriodRecord,
    YTDAccumulator,
    AnnualSummary,
)

from .taxes import (
    TaxBracket,
    TaxYearRules,
    TaxTable,
    TaxTableSlice,
    load_tax_table,
    load_tax_rules_file,
    parse_tax_rules,
    annualize,
    calc_federal_income_tax,
    calc_ss_withholding,
    calc_medicare_withholding,
    calc_additional_medicare,
)

from .pay_calendar import (
    generate_pay_dates,
    get_pay_periods,
)

from .earnings import (
    calc_gross_pay,
    OVERTIME_MULTIPLIER,
)

from .payroll import (
    PayrollRun,
    RunContext,
    StateTaxFn,
    apply_period,
    flat_state_tax,
    parse_employee_profile,
    run_payroll,
)

from .summary import (
    EXPORT_COLUMNS,
    summarize,
    export_rows,
    records_to_csv,
    records_to_dicts,
    summary_to_dict,
    ytd_to_dict,
    write_records_csv,
)

from .w2 import (
    W2Summary,
    build_w2,
)

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    load_employee_profile,
)

__all__ = [
    # Errors
    "PayrollError",
    "UnsupportedYearError",
    "InvalidInputError",
    "ConfigurationDriftError",
    # Money
    "ZERO",
    "Money",
    "Rate",
    "to_decimal",
    "round_cents",
    "format_money",
    # Schemas
    "FilingStatus",
    "PayFrequency",
    "PAY_PERIODS",
    "NamedDeduction",
    "EmployeeProfile",
    "PayPeriodRecord",
    "YTDAccumulator",
    "AnnualSummary",
    # Taxes
    "TaxBracket",
    "TaxYearRules",
    "TaxTable",
    "TaxTableSlice",
    "load_tax_table",
    "load_tax_rules_file",
    "parse_tax_rules",
    "annualize",
    "calc_federal_income_tax",
    "calc_ss_withholding",
    "calc_medicare_withholding",
    "calc_additional_medicare",
    # Calendar
    "generate_pay_dates",
    "get_pay_periods",
    # Earnings
    "calc_gross_pay",
    "OVERTIME_MULTIPLIER",
    # Payroll run
    "PayrollRun",
    "RunContext",
    "StateTaxFn",
    "apply_period",
    "flat_state_tax",
    "parse_employee_profile",
    "run_payroll",
    # Summary & export
    "EXPORT_COLUMNS",
    "summarize",
    "export_rows",
    "records_to_csv",
    "records_to_dicts",
    "summary_to_dict",
    "ytd_to_dict",
    "write_records_csv",
    # W-2
    "W2Summary",
    "build_w2",
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "load_employee_profile",
]
