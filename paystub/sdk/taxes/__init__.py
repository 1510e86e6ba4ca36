"""taxes - Tax rules and per-period withholding calculations.

Scope:
- Year-specific rules loaded from tax_rules/{year}.yaml (TaxTable)
- Federal income tax bracket walk on flat-annualized period pay
- Social Security with wage cap, Medicare with Additional Medicare threshold

Constraints:
- Pure calculation - no run state, no I/O beyond loading the table
- Unknown years fail (UnsupportedYearError); nothing is extrapolated

Usage:
    from paystub.sdk.taxes import load_tax_table, calc_ss_withholding

    table = load_tax_table()
    rules = table.lookup(2024, "single")
    ss = calc_ss_withholding(gross, ytd_gross, rules.ss_wage_cap, rules.ss_rate)
"""

from .schemas import (
    TaxBracket,
    TaxYearRules,
    SocialSecurityRules,
    MedicareRules,
    validate_bracket_ladder,
    validate_pay_calendar,
)

from .rules import (
    TaxTable,
    TaxTableSlice,
    load_tax_table,
    load_tax_rules_file,
    parse_tax_rules,
)

from .withholding import (
    annualize,
    calc_federal_income_tax,
    calc_ss_withholding,
    calc_medicare_withholding,
    calc_additional_medicare,
)

__all__ = [
    # Schemas
    "TaxBracket",
    "TaxYearRules",
    "SocialSecurityRules",
    "MedicareRules",
    "validate_bracket_ladder",
    "validate_pay_calendar",
    # Rules
    "TaxTable",
    "TaxTableSlice",
    "load_tax_table",
    "load_tax_rules_file",
    "parse_tax_rules",
    # Withholding
    "annualize",
    "calc_federal_income_tax",
    "calc_ss_withholding",
    "calc_medicare_withholding",
    "calc_additional_medicare",
]
