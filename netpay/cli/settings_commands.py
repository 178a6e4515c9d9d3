"""Settings CLI commands for Net Pay.

Manages settings.json - durable preferences only.
"""

import click

from netpay.sdk import (
    ConfigError,
    PREFERENCE_KEYS,
    get_settings_path,
    load_preferences,
    reset_settings,
    set_preference,
)


@click.group()
def settings():
    """Manage preferences (settings.json).

    Available settings:
    - standby_rate, overtime150_multiplier, overtime200_multiplier
    - tax_strategy (bracket_credit or flat_rate)
    - tax_preset_id, custom_tax_rate, overtime_tax_rate
    - payroll_period (monthly or four_weekly), apply_credits
    - rules_path: custom tax rules YAML
    """
    pass


@settings.command("show")
def settings_show():
    """Show current preferences."""
    settings_path = get_settings_path()
    current = load_preferences().model_dump(mode="json")

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    for key in PREFERENCE_KEYS:
        value = current.get(key)
        click.echo(f"  {key}: {value if value is not None else '(default)'}")


@settings.command("set")
@click.argument("key")
@click.argument("value", required=False)
@click.option("--clear", is_flag=True, help="Clear the setting, revert to default")
def settings_set(key, value, clear):
    """Set or clear a preference.

    Examples:
        net-pay settings set payroll_period four_weekly
        net-pay settings set apply_credits false
        net-pay settings set custom_tax_rate --clear
    """
    if not clear and value is None:
        raise click.UsageError("VALUE is required unless --clear is given")

    try:
        set_preference(key, None if clear else value)
    except ConfigError as e:
        raise click.ClickException(str(e))

    if clear:
        click.echo(f"Cleared {key}.")
    else:
        click.echo(f"Set {key}: {value}")
    click.echo(f"Saved to: {get_settings_path()}")


@settings.command("reset")
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
def settings_reset(force):
    """Delete settings.json and return to defaults."""
    if not force:
        click.confirm(f"Delete {get_settings_path()}?", abort=True)

    if reset_settings():
        click.echo("Settings removed. Using defaults.")
    else:
        click.echo("No settings file to remove.")
