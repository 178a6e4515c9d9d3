"""CSV export of a pay result.

Rows are ``label,type,amount``: earnings lines, deduction lines, totals, the
non-taxable reimbursement info line and a generation timestamp. Amounts are
rounded half-up to two decimals here and nowhere earlier.
"""

import csv
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Optional

from .schemas import PayResult

CENTS = Decimal("0.01")


def format_amount(amount: Decimal) -> str:
    """Two-decimal string, half-up ("1.005" -> "1.01")."""
    return str(amount.quantize(CENTS, rounding=ROUND_HALF_UP))


def result_rows(result: PayResult, generated_at: Optional[datetime] = None) -> list[list[str]]:
    """Build export rows including the header row."""
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)

    totals = result.totals
    rows = [["label", "type", "amount"]]
    rows.extend([line.label, "earning", format_amount(line.amount)] for line in result.earnings_lines)
    rows.extend([line.label, "deduction", format_amount(line.amount)] for line in result.deduction_lines)
    rows.extend([
        ["Total earnings", "total", format_amount(totals.earnings_total)],
        ["Total reimbursements", "total", format_amount(totals.reimbursements_total)],
        ["Total deductions", "total", format_amount(totals.total_deductions)],
        ["Gross pay", "total", format_amount(totals.gross_pay)],
        ["Taxable wage", "total", format_amount(totals.taxable_wage)],
        ["Social insurance wage", "total", format_amount(totals.social_insurance_wage)],
        ["Health insurance wage", "total", format_amount(totals.health_insurance_wage)],
        ["Estimated tax", "total", format_amount(totals.estimated_tax)],
        ["Net pay", "total", format_amount(totals.net_pay)],
        ["Non-taxable reimbursements", "info", format_amount(totals.non_taxable_reimbursements)],
        ["Timestamp", "meta", generated_at.isoformat()],
    ])
    return rows


def write_result_csv(result: PayResult, output_path: Path, generated_at: Optional[datetime] = None) -> Path:
    """Write a pay result to a CSV file.

    Args:
        result: Result from compute()
        output_path: Path to output CSV file
        generated_at: Timestamp for the meta row (now, UTC, if None)

    Returns:
        Path to the written file
    """
    with open(output_path, "w", newline="") as csvfile:
        writer = csv.writer(csvfile, quoting=csv.QUOTE_ALL)
        writer.writerows(result_rows(result, generated_at))

    return output_path
