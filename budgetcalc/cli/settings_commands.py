"""Settings CLI commands for Budget Calc.

Manages settings.json - defaults for new budgets and directory paths.
"""

import click

from budgetcalc.sdk import (
    FILING_STATUSES,
    SETTING_KEYS,
    TIMEFRAME_FACTORS,
    clear_setting,
    get_budgets_dir,
    get_settings_path,
    load_settings,
    set_setting,
)


@click.group()
def settings():
    """Manage settings (settings.json).

    \b
    Available settings:
    - filing_status: default filing status for new budgets (single, married)
    - state: default jurisdiction for new budgets
    - timeframe: default display timeframe (year, month, biweek, week, day)
    - budgets_dir: where 'new' saves budgets when no path is given
    - tax_rates_dir: directory with custom tax_rates_*.yaml schedules
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
    click.echo("Effective paths:")
    click.echo(f"  budgets_dir: {get_budgets_dir()}")


@settings.command("set")
@click.argument("key", type=click.Choice(SETTING_KEYS))
@click.argument("value")
def settings_set(key, value):
    """Set a setting KEY to VALUE."""
    if key == "filing_status" and value not in FILING_STATUSES:
        raise click.BadParameter(f"Must be one of: {', '.join(FILING_STATUSES)}", param_hint="VALUE")
    if key == "timeframe" and value not in TIMEFRAME_FACTORS:
        raise click.BadParameter(f"Must be one of: {', '.join(TIMEFRAME_FACTORS)}", param_hint="VALUE")

    saved = set_setting(key, value)
    click.echo(f"Set {key}: {value}")
    click.echo(f"Saved to: {saved}")


@settings.command("clear")
@click.argument("key", type=click.Choice(SETTING_KEYS))
def settings_clear(key):
    """Clear a setting, reverting to its default."""
    if clear_setting(key):
        click.echo(f"Cleared {key} setting.")
    else:
        click.echo(f"{key} was not set.")
