"""Configuration management for Paystub.

settings.json - Machine-specific settings
   - tax_rules_dir: directory of <year>.yaml files overriding the bundled rules
   - default_output_format: text, json or csv

Employee profiles are YAML files passed explicitly (--profile), never
read implicitly from the config directory.

Config directory resolution:
1. PAYSTUB_CONFIG_PATH environment variable (if set)
2. ~/.config/paystub/ (XDG_CONFIG_HOME fallback)
"""

import json
import os
from pathlib import Path
from typing import Any, Union

import yaml

from .errors import InvalidInputError
from .payroll import parse_employee_profile
from .schemas import EmployeeProfile


APP_NAME = "paystub"
SETTINGS_FILENAME = "settings.json"

OUTPUT_FORMATS = ("text", "json", "csv")

# Keys accepted by set_setting()
KNOWN_SETTINGS = ("tax_rules_dir", "default_output_format")


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. PAYSTUB_CONFIG_PATH environment variable
    2. ~/.config/paystub/ (XDG_CONFIG_HOME)

    Returns:
        Path to the configuration directory
    """
    env_path = os.environ.get("PAYSTUB_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load machine-specific settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Save machine-specific settings to settings.json.

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json.

    Args:
        key: Setting key (e.g., "tax_rules_dir", "default_output_format")
        default: Default value if key not found
    """
    return load_settings().get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json. A value of None removes the key.

    Raises:
        ValueError: Unknown key, or an output format that is not supported
    """
    if key not in KNOWN_SETTINGS:
        raise ValueError(
            f"Unknown setting '{key}'. Known settings: {', '.join(KNOWN_SETTINGS)}"
        )
    if key == "default_output_format" and value is not None and value not in OUTPUT_FORMATS:
        raise ValueError(
            f"Invalid output format '{value}'. Choose from: {', '.join(OUTPUT_FORMATS)}"
        )

    settings = load_settings()
    if value is None:
        settings.pop(key, None)
    else:
        settings[key] = value
    return save_settings(settings)


def get_default_output_format() -> str:
    fmt = get_setting("default_output_format", "text")
    return fmt if fmt in OUTPUT_FORMATS else "text"


def read_profile_file(path: Union[str, Path]) -> dict:
    """Read raw profile fields from a YAML file (no validation).

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidInputError: If the YAML is malformed or not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Employee profile not found: {path}")

    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise InvalidInputError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidInputError(f"{path}: expected a mapping of profile fields")
    return data


def load_employee_profile(path: Union[str, Path]) -> EmployeeProfile:
    """Load and validate an employee profile YAML file.

    Args:
        path: Path to the profile YAML

    Returns:
        Validated EmployeeProfile

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidInputError: If the YAML is malformed or fails validation
    """
    return parse_employee_profile(read_profile_file(path))
