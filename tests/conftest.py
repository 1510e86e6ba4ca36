"""Shared fixtures: isolated settings directory, bundled tax table, profiles."""

import pytest

from paystub.sdk import load_tax_table, parse_employee_profile


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point settings at an empty temp config dir so user settings never leak in."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("PAYSTUB_CONFIG_PATH", str(config_dir))
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    return {"config_dir": config_dir}


@pytest.fixture
def tax_table():
    """Bundled tax rules (2020-2025)."""
    return load_tax_table()


@pytest.fixture
def profile_data():
    """Factory for raw profile dicts: $30/h x 80h biweekly, single, 2024 unless overridden."""
    def make(**overrides) -> dict:
        data = {
            "hourly_rate": 30,
            "hours_per_period": 80,
            "filing_status": "single",
            "pay_frequency": "biweekly",
            "year": 2024,
        }
        data.update(overrides)
        return data
    return make


@pytest.fixture
def base_profile(profile_data):
    return parse_employee_profile(profile_data())
