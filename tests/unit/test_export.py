"""Tests for CSV export of pay results."""

import csv
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from netpay.sdk import compute
from netpay.sdk.export import format_amount, result_rows, write_result_csv
from netpay.sdk.selftest import bracket_scenario, overtime_scenario

GENERATED_AT = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("amount,expected", [
    ("1.005", "1.01"),
    ("2.675", "2.68"),
    ("1.004", "1.00"),
    ("-1.005", "-1.01"),
    ("0", "0.00"),
    ("794.83745", "794.84"),
])
def test_format_amount_rounds_half_up(amount, expected):
    assert format_amount(Decimal(amount)) == expected


class TestResultRows:

    def test_overtime_scenario_rows(self, rules):
        rows = result_rows(compute(overtime_scenario(), rules), GENERATED_AT)

        assert rows == [
            ["label", "type", "amount"],
            ["Salary", "earning", "0.00"],
            ["Shift allowance", "earning", "516.00"],
            ["Estimated tax 35.00%", "deduction", "35.00"],
            ["Pension", "deduction", "80.00"],
            ["Total earnings", "total", "516.00"],
            ["Total reimbursements", "total", "150.00"],
            ["Total deductions", "total", "115.00"],
            ["Gross pay", "total", "666.00"],
            ["Taxable wage", "total", "100.00"],
            ["Social insurance wage", "total", "0.00"],
            ["Health insurance wage", "total", "0.00"],
            ["Estimated tax", "total", "35.00"],
            ["Net pay", "total", "551.00"],
            ["Non-taxable reimbursements", "info", "50.00"],
            ["Timestamp", "meta", "2024-03-31T12:00:00+00:00"],
        ]

    def test_rounding_only_at_export(self, rules):
        result = compute(bracket_scenario(), rules)
        rows = {row[0]: row[2] for row in result_rows(result, GENERATED_AT)}

        assert result.totals.estimated_tax == Decimal("794.83745")
        assert rows["Estimated tax"] == "794.84"
        assert rows["Net pay"] == "2955.16"

    def test_default_timestamp_is_now(self, rules):
        rows = result_rows(compute(bracket_scenario(), rules))
        timestamp = datetime.fromisoformat(rows[-1][2])
        assert timestamp.tzinfo is not None


def test_write_result_csv(tmp_path, rules):
    output = tmp_path / "pay.csv"

    path = write_result_csv(compute(overtime_scenario(), rules), output, GENERATED_AT)

    assert path == output
    assert output.read_text().splitlines()[0] == '"label","type","amount"'
    with open(output, newline="") as f:
        rows = list(csv.reader(f))
    assert rows == result_rows(compute(overtime_scenario(), rules), GENERATED_AT)
