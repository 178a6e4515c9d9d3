"""Net Pay CLI - Command-line interface for take-home pay estimates."""

import json
import logging
import os
from pathlib import Path

import click
import yaml
from rich.console import Console

from netpay import __version__
from netpay.sdk import (
    build_declaration,
    compute,
    hours_warning,
    load_preferences,
    load_tax_rules,
    write_result_csv,
)
from netpay.sdk.selftest import run_self_tests

from .renderers.result_renderer import render_result
from .settings_commands import settings as settings_group


def _configure_logging() -> None:
    """Configure logging based on LOG_LEVEL environment variable."""
    level_name = os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(version=__version__, prog_name="net-pay")
def cli():
    """Net Pay - Take-home pay estimates from hours, rates and allowances.

    A declaration file (YAML or JSON) lists hours, rates, earnings items,
    reimbursements and deductions for one pay period. Durable preferences
    (multipliers, standby rate, tax strategy) come from settings.json:

    \b
    1. NET_PAY_CONFIG_PATH environment variable
    2. ~/.config/net-pay/settings.json (XDG default)

    Results are estimates, not payslips.
    """
    _configure_logging()


cli.add_command(settings_group)


def load_declaration_file(path: Path) -> dict:
    """Read a YAML/JSON declaration file into a dict."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot read declaration {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise click.ClickException(f"Declaration {path} must be a mapping, got {type(data).__name__}")
    return data


def _prepare(declaration_file, strategy, period, credits, rate, preset, rules_path):
    """Load inputs, apply command-line tax overrides, build the declaration."""
    preferences = load_preferences()
    rules = load_tax_rules(rules_path or preferences.rules_path)

    raw = load_declaration_file(Path(declaration_file))
    tax_config = raw.get("tax_config")
    tax_config = dict(tax_config) if isinstance(tax_config, dict) else {}
    if strategy:
        tax_config["strategy"] = strategy
    if period:
        tax_config["payroll_period"] = period
    if credits is not None:
        tax_config["apply_credits"] = credits
    if rate is not None:
        tax_config.update({"strategy": "flat_rate", "mode": "custom", "rate": rate, "preset_id": None})
    if preset:
        tax_config.update({"strategy": "flat_rate", "mode": "preset", "preset_id": preset})
    raw["tax_config"] = tax_config

    declaration = build_declaration(raw, rules, preferences)
    return declaration, rules


def tax_options(func):
    """Options shared by calc and export."""
    func = click.option("--rules", "rules_path", type=click.Path(dir_okay=False),
                        help="Tax rules YAML (default: packaged rules or settings rules_path)")(func)
    func = click.option("--preset", help="Flat-rate tax preset id (implies --strategy flat_rate)")(func)
    func = click.option("--rate", help="Custom flat tax rate as decimal, e.g. 0.35 (implies --strategy flat_rate)")(func)
    func = click.option("--credits/--no-credits", default=None, help="Apply general and labor tax credits")(func)
    func = click.option("--period", type=click.Choice(["monthly", "four_weekly"]), help="Payroll period")(func)
    func = click.option("--strategy", type=click.Choice(["bracket_credit", "flat_rate"]), help="Tax strategy")(func)
    return func


@cli.command("calc")
@click.argument("declaration_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format (default: table)")
@tax_options
def calc(declaration_file, output_format, strategy, period, credits, rate, preset, rules_path):
    """Estimate net pay for a declaration file.

    Examples:
        net-pay calc march.yaml
        net-pay calc march.yaml --no-credits --period four_weekly
        net-pay calc march.yaml --preset rate3748 --format json
    """
    declaration, rules = _prepare(declaration_file, strategy, period, credits, rate, preset, rules_path)
    result = compute(declaration, rules)

    if output_format == "json":
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return

    warnings = []
    if hours_warning(declaration.hours, rules):
        warnings.append(
            f"Total hours ({declaration.hours.total}) exceed {rules.limits.hours_soft_max}; check the input."
        )
    render_result(Console(), result, hours=declaration.hours, warnings=warnings)


@cli.command("export")
@click.argument("declaration_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), default="net-pay.csv",
              help="Output CSV path (default: net-pay.csv)")
@tax_options
def export(declaration_file, output, strategy, period, credits, rate, preset, rules_path):
    """Write the estimate for a declaration file to CSV."""
    declaration, rules = _prepare(declaration_file, strategy, period, credits, rate, preset, rules_path)
    result = compute(declaration, rules)

    try:
        path = write_result_csv(result, Path(output))
    except OSError as e:
        raise click.ClickException(f"Cannot write {output}: {e}")
    click.echo(f"Wrote {path}")


@cli.command("presets")
@click.option("--rules", "rules_path", type=click.Path(dir_okay=False), help="Tax rules YAML")
def presets(rules_path):
    """List flat-rate tax presets."""
    rules = load_tax_rules(rules_path or load_preferences().rules_path)
    if not rules.presets:
        click.echo("No presets defined.")
        return
    default_id = rules.defaults.tax_preset_id
    for preset in rules.presets:
        marker = " (default)" if preset.id == default_id else ""
        click.echo(f"  {preset.id:<12} {preset.label}{marker}")


@cli.command("selftest")
@click.option("--rules", "rules_path", type=click.Path(dir_okay=False), help="Tax rules YAML")
def selftest(rules_path):
    """Run the built-in reference scenarios."""
    rules = load_tax_rules(rules_path) if rules_path else None
    failures = run_self_tests(rules)
    if failures:
        for failure in failures:
            click.echo(f"  {failure}", err=True)
        raise click.ClickException("Self-test failed")
    click.echo(click.style("Self-test ok", fg="green"))


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
