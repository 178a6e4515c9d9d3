"""Packages engine values into a PayResult.

Line items keep the declared order. The estimated-tax line always comes
first among deduction lines, followed by the user deductions.
"""

from decimal import Decimal
from typing import Sequence

from .schemas import (
    Deduction,
    DeductionDetail,
    EarningsItem,
    PayComponents,
    PayLine,
    PayResult,
    PayTotals,
)


def assemble_result(
    earnings: Sequence[EarningsItem],
    deductions: Sequence[Deduction],
    resolved_deductions: Sequence[Decimal],
    components: PayComponents,
    tax_label: str,
    totals: dict,
) -> PayResult:
    """Build a PayResult.

    Args:
        earnings: Earnings items with computed amounts already filled in
        deductions: User deductions in declared order
        resolved_deductions: Resolved amount per deduction, same order
        components: Pay derived from hours and rates
        tax_label: Label for the estimated-tax line
        totals: Values for PayTotals, keyed by field name
    """
    earnings_lines = tuple(PayLine(label=item.display_label, amount=item.amount) for item in earnings)

    details = tuple(
        DeductionDetail(id=d.id, label=d.label, amount=amount)
        for d, amount in zip(deductions, resolved_deductions)
    )

    deduction_lines = (PayLine(label=tax_label, amount=totals["estimated_tax"]),) + tuple(
        PayLine(label=detail.label, amount=detail.amount) for detail in details
    )

    return PayResult(
        earnings_lines=earnings_lines,
        deduction_lines=deduction_lines,
        deduction_details=details,
        components=components,
        totals=PayTotals(**totals),
        tax_label=tax_label,
    )
