"""Tests for the net-pay CLI commands."""

import csv
import json
from decimal import Decimal

import pytest
import yaml
from click.testing import CliRunner

from netpay.cli.__main__ import cli

OVERTIME_DECLARATION = {
    "hours": {"overtime150": 10, "overtime200": 5, "standby": 8},
    "rates": {"base": 20, "standby": 2},
    "earnings_items": [
        {"type": "salary"},
        {"type": "shift_allowance", "counts_toward": []},
    ],
    "reimbursements": [
        {"id": "a", "label": "Travel", "amount": 50},
        {"id": "b", "label": "Bonus", "amount": 100, "taxable": True},
    ],
    "deductions": [{"id": "c", "label": "Pension", "amount": 80}],
    "tax_config": {"strategy": "flat_rate", "rate": 0.35},
}

SALARY_DECLARATION = {
    "hours": {"normal": "150"},
    "rates": {"base": "25"},
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def write_declaration(tmp_path):
    """Write a declaration dict as YAML and return its path."""
    def _write(data, name="declaration.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data))
        return str(path)
    return _write


def calc_json(runner, path, *args):
    result = runner.invoke(cli, ["calc", path, "--format", "json", *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestCalc:

    def test_json_totals(self, runner, isolated_env, write_declaration):
        data = calc_json(runner, write_declaration(OVERTIME_DECLARATION))
        totals = data["totals"]

        assert Decimal(totals["gross_pay"]) == Decimal("666")
        assert Decimal(totals["taxable_wage"]) == Decimal("100")
        assert Decimal(totals["estimated_tax"]) == Decimal("35")
        assert Decimal(totals["net_pay"]) == Decimal("551")
        assert data["tax_label"] == "Estimated tax 35.00%"
        assert [line["label"] for line in data["deduction_lines"]] == ["Estimated tax 35.00%", "Pension"]

    def test_default_bracket_credit(self, runner, isolated_env, write_declaration):
        data = calc_json(runner, write_declaration(SALARY_DECLARATION))

        assert Decimal(data["totals"]["estimated_tax"]) == Decimal("794.83745")
        assert data["tax_label"] == "Estimated payroll tax (monthly, with credits)"

    def test_period_and_credit_overrides(self, runner, isolated_env, write_declaration):
        data = calc_json(runner, write_declaration(SALARY_DECLARATION), "--no-credits", "--period", "four_weekly")

        # 48750 * 0.3693 / 13
        assert Decimal(data["totals"]["estimated_tax"]) == Decimal("1384.875")

    def test_rate_override(self, runner, isolated_env, write_declaration):
        data = calc_json(runner, write_declaration(SALARY_DECLARATION), "--rate", "0.5")
        assert Decimal(data["totals"]["estimated_tax"]) == Decimal("1875")

    def test_preset_override(self, runner, isolated_env, write_declaration):
        data = calc_json(runner, write_declaration(SALARY_DECLARATION), "--preset", "rate3748")
        assert Decimal(data["totals"]["estimated_tax"]) == Decimal("1405.5")

    def test_saved_preferences_apply(self, runner, isolated_env, write_declaration):
        isolated_env["settings_path"].write_text(json.dumps({"payroll_period": "four_weekly", "apply_credits": False}))

        data = calc_json(runner, write_declaration(SALARY_DECLARATION))

        assert data["tax_label"] == "Estimated payroll tax (four-weekly, no credits)"

    def test_table_output(self, runner, isolated_env, write_declaration):
        result = runner.invoke(cli, ["calc", write_declaration(OVERTIME_DECLARATION)])

        assert result.exit_code == 0, result.output
        assert "NET PAY" in result.output
        assert "551.00" in result.output
        assert "Pension" in result.output

    def test_hours_warning(self, runner, isolated_env, write_declaration):
        result = runner.invoke(cli, ["calc", write_declaration({"hours": {"normal": 500}})])

        assert result.exit_code == 0, result.output
        assert "exceed 400" in result.output

    def test_declaration_must_be_mapping(self, runner, isolated_env, write_declaration):
        result = runner.invoke(cli, ["calc", write_declaration([1, 2])])

        assert result.exit_code == 1
        assert "must be a mapping" in result.output

    def test_entries_of_wrong_shape_skipped(self, runner, isolated_env, write_declaration):
        declaration = dict(OVERTIME_DECLARATION, reimbursements=["travel"], tax_config=["flat_rate"])

        data = calc_json(runner, write_declaration(declaration))

        assert Decimal(data["totals"]["reimbursements_total"]) == 0
        assert data["tax_label"] == "Estimated payroll tax (monthly, with credits)"

    def test_undecodable_settings_use_defaults(self, runner, isolated_env, write_declaration):
        isolated_env["settings_path"].write_bytes(b"\xff\xfe")

        data = calc_json(runner, write_declaration(SALARY_DECLARATION))
        assert Decimal(data["totals"]["estimated_tax"]) == Decimal("794.83745")

        result = runner.invoke(cli, ["settings", "show"])
        assert result.exit_code == 0, result.output
        assert "payroll_period: (default)" in result.output

    def test_missing_file(self, runner, isolated_env, tmp_path):
        result = runner.invoke(cli, ["calc", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 2


class TestExport:

    def test_writes_csv(self, runner, isolated_env, write_declaration, tmp_path):
        output = tmp_path / "out.csv"

        result = runner.invoke(cli, ["export", write_declaration(OVERTIME_DECLARATION), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert f"Wrote {output}" in result.output
        with open(output, newline="") as f:
            rows = {row[0]: row for row in csv.reader(f)}
        assert rows["Net pay"] == ["Net pay", "total", "551.00"]
        assert rows["Non-taxable reimbursements"] == ["Non-taxable reimbursements", "info", "50.00"]


class TestPresetsAndSelftest:

    def test_presets(self, runner, isolated_env):
        result = runner.invoke(cli, ["presets"])

        assert result.exit_code == 0
        assert "rate3748" in result.output
        default_line = next(line for line in result.output.splitlines() if "rate3582" in line)
        assert "(default)" in default_line

    def test_selftest_ok(self, runner, isolated_env):
        result = runner.invoke(cli, ["selftest"])

        assert result.exit_code == 0, result.output
        assert "Self-test ok" in result.output

    def test_selftest_fails_with_other_rules(self, runner, isolated_env, tmp_path):
        path = tmp_path / "flat_rules.yaml"
        path.write_text(yaml.safe_dump({
            "period_factors": {"monthly": 12, "four_weekly": 13},
            "brackets": [{"up_to": None, "rate": 0.5}],
            "credits": {
                "general": {"max": 0, "phase_out_start": 0, "phase_out_rate": 0},
                "labor": {"phase_in_end": 0, "phase_in_rate": 0, "max": 0, "plateau_end": 0, "phase_out_rate": 0},
            },
        }))

        result = runner.invoke(cli, ["selftest", "--rules", str(path)])

        assert result.exit_code == 1
        assert "bracket_credit_monthly: estimated_tax" in result.output
        assert "Self-test failed" in result.output


class TestSettings:

    def test_set_show_reset(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "set", "payroll_period", "four_weekly"])
        assert result.exit_code == 0, result.output
        assert "Set payroll_period: four_weekly" in result.output

        result = runner.invoke(cli, ["settings", "show"])
        assert "payroll_period: four_weekly" in result.output
        assert "standby_rate: (default)" in result.output

        result = runner.invoke(cli, ["settings", "reset", "--force"])
        assert "Settings removed. Using defaults." in result.output
        assert not isolated_env["settings_path"].exists()

    def test_clear(self, runner, isolated_env):
        runner.invoke(cli, ["settings", "set", "custom_tax_rate", "0.4"])

        result = runner.invoke(cli, ["settings", "set", "custom_tax_rate", "--clear"])

        assert result.exit_code == 0, result.output
        assert "Cleared custom_tax_rate." in result.output
        assert "custom_tax_rate" not in json.loads(isolated_env["settings_path"].read_text())

    def test_unknown_key(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "set", "hours", "160"])

        assert result.exit_code == 1
        assert "Unknown setting 'hours'" in result.output

    def test_value_required(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "set", "payroll_period"])
        assert result.exit_code == 2

    def test_reset_without_file(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "reset", "--force"])
        assert "No settings file to remove." in result.output
