"""Settings CLI commands for Paystub.

Manages settings.json - tax rules directory and output preferences.
"""

import click
from pathlib import Path

from paystub.sdk import (
    load_settings,
    get_setting,
    set_setting,
    get_settings_path,
)
from paystub.sdk.config import OUTPUT_FORMATS, get_default_output_format


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - tax_rules_dir: directory of <year>.yaml files overriding bundled rules
    - default_output_format: text, json or csv
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    settings_path = get_settings_path()
    current = load_settings()

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if not current:
        click.echo("No settings configured (using defaults).")
    else:
        click.echo("Current settings:")
        for key, value in current.items():
            click.echo(f"  {key}: {value}")

    click.echo()
    click.echo("Effective values:")
    click.echo(f"  tax_rules_dir: {get_setting('tax_rules_dir') or '(bundled rules only)'}")
    click.echo(f"  default_output_format: {get_default_output_format()}")


@settings.command("tax-rules-dir")
@click.argument("path", required=False, type=click.Path())
@click.option("--clear", is_flag=True, help="Clear custom tax_rules_dir, use bundled rules only")
def settings_tax_rules_dir(path, clear):
    """Set or clear the custom tax rules directory.

    PATH holds <year>.yaml files. A year found there replaces the bundled
    rules for that year; new years are added.

    Examples:
        paystub settings tax-rules-dir ~/paystub/tax_rules
        paystub settings tax-rules-dir --clear
    """
    if clear:
        if get_setting("tax_rules_dir"):
            set_setting("tax_rules_dir", None)
            click.echo("Cleared tax_rules_dir setting.")
        else:
            click.echo("tax_rules_dir was not set.")
        return

    if not path:
        current = get_setting("tax_rules_dir")
        if current:
            click.echo(f"Current tax_rules_dir: {current}")
        else:
            click.echo("No custom tax_rules_dir set. Using bundled rules only.")
        return

    rules_path = Path(path).expanduser().resolve()
    if not rules_path.is_dir():
        raise click.ClickException(f"Not a directory: {rules_path}")

    set_setting("tax_rules_dir", str(rules_path))
    click.echo(f"Set tax_rules_dir: {rules_path}")
    click.echo(f"Saved to: {get_settings_path()}")


@settings.command("output-format")
@click.argument("fmt", required=False, type=click.Choice(OUTPUT_FORMATS))
def settings_output_format(fmt):
    """Show or set the default output format (text, json, csv)."""
    if not fmt:
        click.echo(f"Default output format: {get_default_output_format()}")
        return

    set_setting("default_output_format", fmt)
    click.echo(f"Set default_output_format: {fmt}")
