"""Built-in reference scenarios.

Two worked examples with hand-computed expectations, one per tax strategy.
Used by ``net-pay selftest`` to confirm an installation and its rules file
produce the documented numbers.
"""

from decimal import Decimal
from typing import Optional

from .engine import compute
from .schemas import (
    Deduction,
    EarningsItem,
    EarningsType,
    Hours,
    Rates,
    Reimbursement,
    WageBase,
    WageDeclaration,
)
from .taxes.rules import default_tax_rules
from .taxes.schemas import BracketCreditTaxConfig, FlatRateTaxConfig, TaxRules

TOLERANCE = Decimal("0.001")


def overtime_scenario() -> WageDeclaration:
    """Overtime and standby only, flat 35%, one taxable reimbursement.

    gross = 10*20*1.5 + 5*20*2 + 8*2 + (50 + 100) = 666
    """
    return WageDeclaration(
        hours=Hours(normal=0, overtime150=10, overtime200=5, standby=8),
        rates=Rates(base=20, standby=2, overtime150_multiplier=Decimal("1.5"), overtime200_multiplier=2),
        earnings_items=(
            EarningsItem(type=EarningsType.SALARY, counts_toward=frozenset(WageBase)),
            EarningsItem(type=EarningsType.SHIFT_ALLOWANCE),
        ),
        reimbursements=(
            Reimbursement(id="a", label="Travel", amount=50),
            Reimbursement(id="b", label="Bonus", amount=100, counts_toward=frozenset({WageBase.TAXABLE})),
        ),
        deductions=(Deduction(id="c", label="Pension", amount=80),),
        tax_config=FlatRateTaxConfig(mode="custom", rate=Decimal("0.35")),
    )


def bracket_scenario() -> WageDeclaration:
    """3750 per month of salary under the bracket/credit model."""
    return WageDeclaration(
        hours=Hours(normal=150),
        rates=Rates(base=25),
        earnings_items=(
            EarningsItem(type=EarningsType.SALARY, counts_toward=frozenset(WageBase)),
            EarningsItem(type=EarningsType.SHIFT_ALLOWANCE, counts_toward=frozenset(WageBase)),
        ),
        tax_config=BracketCreditTaxConfig(payroll_period="monthly", apply_credits=True),
    )


SCENARIOS = {
    "overtime_flat_rate": (
        overtime_scenario,
        {
            "gross_pay": Decimal("666"),
            "taxable_wage": Decimal("100"),
            "estimated_tax": Decimal("35"),
            "net_pay": Decimal("551"),
        },
    ),
    "bracket_credit_monthly": (
        bracket_scenario,
        {
            "gross_pay": Decimal("3750"),
            "taxable_wage": Decimal("3750"),
            "estimated_tax": Decimal("794.83745"),
            "net_pay": Decimal("2955.16255"),
        },
    ),
}


def run_self_tests(rules: Optional[TaxRules] = None) -> list[str]:
    """Run the reference scenarios.

    Returns:
        List of failure messages; empty when every scenario matches
    """
    rules = rules or default_tax_rules()
    failures = []

    for name, (build, expected) in SCENARIOS.items():
        totals = compute(build(), rules).totals
        for field, want in expected.items():
            got = getattr(totals, field)
            if abs(got - want) > TOLERANCE:
                failures.append(f"{name}: {field} = {got}, expected {want}")

    return failures
