"""Tax table loading and lookup.

Year-specific rules live in tax_rules/{year}.yaml inside the package. A
custom directory (argument or the 'tax_rules_dir' setting) can add years or
replace bundled ones file by file. The loaded TaxTable is immutable and is
passed explicitly into each payroll run.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationDriftError, InvalidInputError, UnsupportedYearError
from ..schemas import FilingStatus
from .schemas import TaxBracket, TaxYearRules

logger = logging.getLogger(__name__)


def _get_tax_rules_dir() -> Path:
    """Get the bundled tax_rules directory path."""
    return Path(__file__).parent.parent.parent / "tax_rules"  # taxes -> sdk -> paystub


@dataclass(frozen=True)
class TaxTableSlice:
    """Rules for one year and filing status, as consumed by the calculators."""

    year: int
    filing_status: FilingStatus
    ss_wage_cap: Decimal
    ss_rate: Decimal
    medicare_rate: Decimal
    additional_medicare_rate: Decimal
    additional_medicare_threshold: Decimal
    brackets: tuple[TaxBracket, ...]


class TaxTable:
    """Immutable, versioned lookup of per-year payroll tax rules."""

    def __init__(self, rules: Mapping[int, TaxYearRules]):
        self._rules = MappingProxyType(dict(sorted(rules.items())))

    def __contains__(self, year: int) -> bool:
        return year in self._rules

    def __repr__(self) -> str:
        return f"TaxTable(years={list(self._rules)})"

    @property
    def years(self) -> list[int]:
        """Supported years, ascending."""
        return list(self._rules)

    def rules_for(self, year: int) -> TaxYearRules:
        """Full rules for a year. No fallback to neighbouring years.

        Raises:
            UnsupportedYearError: If no rules exist for the year
        """
        try:
            return self._rules[year]
        except KeyError:
            raise UnsupportedYearError.for_year(year, self.years) from None

    def lookup(self, year: int, filing_status: FilingStatus) -> TaxTableSlice:
        """Rules for a year narrowed to one filing status.

        Raises:
            UnsupportedYearError: If no rules exist for the year
        """
        rules = self.rules_for(year)
        try:
            status = FilingStatus(filing_status)
        except ValueError:
            raise InvalidInputError(f"Unknown filing status: {filing_status!r}") from None
        return TaxTableSlice(
            year=year,
            filing_status=status,
            ss_wage_cap=rules.social_security.wage_cap,
            ss_rate=rules.social_security.tax_rate,
            medicare_rate=rules.medicare.tax_rate,
            additional_medicare_rate=rules.medicare.additional_rate,
            additional_medicare_threshold=rules.medicare.additional_threshold[status],
            brackets=rules.federal_brackets[status],
        )


def parse_tax_rules(data: dict, year: Optional[int] = None, source: str = "<dict>") -> TaxYearRules:
    """Validate a rules dict (as loaded from YAML).

    Raises:
        ConfigurationDriftError: If the rules fail schema or ladder checks
    """
    if not isinstance(data, dict):
        raise ConfigurationDriftError(f"{source}: expected a mapping, got {type(data).__name__}")

    data = dict(data)
    if year is not None:
        declared = data.setdefault("year", year)
        if declared != year:
            raise ConfigurationDriftError(f"{source}: declares year {declared}, expected {year}")

    try:
        return TaxYearRules.model_validate(data)
    except ValidationError as e:
        raise ConfigurationDriftError(f"{source}: invalid tax rules\n{e}") from e


def load_tax_rules_file(path: Path) -> TaxYearRules:
    """Load and validate one tax_rules/{year}.yaml file."""
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationDriftError(f"{path}: invalid YAML\n{e}") from e
    return parse_tax_rules(data, year=int(path.stem), source=str(path))


def _load_rules_dir(rules_dir: Path) -> dict[int, TaxYearRules]:
    rules = {}
    for path in sorted(rules_dir.glob("*.yaml")):
        if not path.stem.isdigit():
            logger.debug(f"skipping non-year rules file: {path.name}")
            continue
        rules[int(path.stem)] = load_tax_rules_file(path)
    return rules


def load_tax_table(rules_dir: Optional[Union[str, Path]] = None) -> TaxTable:
    """Load bundled tax rules, overlaid with a custom rules directory.

    Resolution for the custom directory:
    1. rules_dir argument
    2. 'tax_rules_dir' from settings.json
    3. None (bundled rules only)

    Args:
        rules_dir: Directory containing {year}.yaml files

    Returns:
        TaxTable covering every year found

    Raises:
        ConfigurationDriftError: If any rules file is invalid
        FileNotFoundError: If the custom directory does not exist
    """
    from ..config import get_setting

    rules = _load_rules_dir(_get_tax_rules_dir())
    logger.debug(f"loaded bundled tax rules for years {sorted(rules)}")

    custom = rules_dir if rules_dir is not None else get_setting("tax_rules_dir")
    if custom:
        custom_dir = Path(custom).expanduser()
        if not custom_dir.is_dir():
            raise FileNotFoundError(f"Tax rules directory not found: {custom_dir}")
        overrides = _load_rules_dir(custom_dir)
        for year in sorted(overrides):
            action = "replacing" if year in rules else "adding"
            logger.info(f"{action} tax rules for {year} from {custom_dir}")
        rules.update(overrides)

    return TaxTable(rules)
