"""Tests for settings.json handling and employee profile loading."""

import json
from decimal import Decimal
from pathlib import Path

import pytest

from paystub.sdk import FilingStatus, InvalidInputError, PayFrequency
from paystub.sdk.config import (
    get_config_dir,
    get_default_output_format,
    get_setting,
    get_settings_path,
    load_employee_profile,
    load_settings,
    set_setting,
)

PROFILE_YAML = """\
employee_name: Dana Example
employer_name: Example Corp
hourly_rate: 42.50
hours_per_period: 80
filing_status: married_filing_jointly
pay_frequency: semimonthly
year: 2025
state_rate: 0.0307
additional_deductions:
  - name: Union dues
    amount: 12.00
"""


class TestConfigDir:

    def test_env_var(self, isolated_env):
        assert get_config_dir() == isolated_env["config_dir"]
        assert get_settings_path() == isolated_env["config_dir"] / "settings.json"

    def test_xdg_fallback(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PAYSTUB_CONFIG_PATH")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        assert get_config_dir() == tmp_path / "xdg" / "paystub"


class TestSettings:

    def test_empty_when_missing(self):
        assert load_settings() == {}
        assert get_setting("tax_rules_dir") is None
        assert get_default_output_format() == "text"

    def test_set_and_get(self, isolated_env):
        path = set_setting("default_output_format", "json")
        assert path == isolated_env["config_dir"] / "settings.json"
        assert json.loads(path.read_text()) == {"default_output_format": "json"}
        assert get_default_output_format() == "json"

    def test_none_removes(self):
        set_setting("tax_rules_dir", "/tmp/rules")
        set_setting("tax_rules_dir", None)
        assert "tax_rules_dir" not in load_settings()

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown setting"):
            set_setting("data_dir", "/tmp")

    def test_invalid_output_format(self):
        with pytest.raises(ValueError, match="xml"):
            set_setting("default_output_format", "xml")

    def test_hand_edited_bad_format_falls_back_to_text(self, isolated_env):
        (isolated_env["config_dir"] / "settings.json").write_text('{"default_output_format": "xml"}')
        assert get_default_output_format() == "text"


class TestLoadEmployeeProfile:

    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text(PROFILE_YAML)

        profile = load_employee_profile(path)
        assert profile.hourly_rate == Decimal("42.50")
        assert profile.filing_status == FilingStatus.MFJ
        assert profile.pay_frequency == PayFrequency.SEMIMONTHLY
        assert profile.state_rate == Decimal("0.0307")
        assert profile.total_other_deductions == Decimal("12.00")
        assert profile.periods_per_year == 24

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_employee_profile(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text("hourly_rate: [30\n")
        with pytest.raises(InvalidInputError, match="Invalid YAML"):
            load_employee_profile(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text("- 30\n- 80\n")
        with pytest.raises(InvalidInputError, match="mapping"):
            load_employee_profile(path)

    def test_typo_in_field_name(self, tmp_path):
        path = Path(tmp_path / "profile.yaml")
        path.write_text(PROFILE_YAML.replace("hours_per_period", "hours_per_periods"))
        with pytest.raises(InvalidInputError, match="hours_per_period"):
            load_employee_profile(path)
