"""Pay computation engine.

compute() maps a WageDeclaration to a PayResult:

1. Derive base, overtime and standby pay from hours and rates
2. Replace the computed earnings items (salary, shift allowance)
3. Sum earnings and reimbursements
4. Build the taxable, social-insurance and health-insurance wage bases
5. Resolve fixed and percent-of-basis deductions
6. Estimate tax with the configured strategy
7. Gross, net and non-taxable reimbursement totals

The function is pure: no I/O, no mutation of the declaration, and the same
declaration always yields the same result.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from .assembler import assemble_result
from .schemas import (
    Deduction,
    DeductionKind,
    EarningsItem,
    EarningsType,
    Hours,
    PayComponents,
    PayResult,
    Rates,
    WageBase,
    WageComponent,
    WageDeclaration,
)
from .taxes.rules import default_tax_rules
from .taxes.schemas import TaxRules
from .taxes.strategies import strategy_for

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def compute_components(hours: Hours, rates: Rates) -> PayComponents:
    """Pay derived from hours and rates."""
    overtime150_pay = hours.overtime150 * rates.base * rates.overtime150_multiplier
    overtime200_pay = hours.overtime200 * rates.base * rates.overtime200_multiplier
    standby_pay = hours.standby * rates.standby

    return PayComponents(
        base_pay=hours.normal * rates.base,
        overtime150_pay=overtime150_pay,
        overtime200_pay=overtime200_pay,
        standby_pay=standby_pay,
        shift_allowance_total=overtime150_pay + overtime200_pay + standby_pay,
    )


def derive_earnings(items: Iterable[EarningsItem], components: PayComponents) -> tuple[EarningsItem, ...]:
    """Earnings items with computed amounts filled in.

    Returns copies; the declared items are left untouched.
    """
    computed = {
        EarningsType.SALARY: components.base_pay,
        EarningsType.SHIFT_ALLOWANCE: components.shift_allowance_total,
    }
    return tuple(
        item.model_copy(update={"amount": computed[item.type]}) if item.is_computed else item
        for item in items
    )


def sum_where(components: Iterable[WageComponent], base: Optional[WageBase] = None) -> Decimal:
    """Sum amounts counting toward ``base`` (all amounts if base is None)."""
    return sum(
        (c.amount for c in components if base is None or base in c.counts_toward),
        ZERO,
    )


def resolve_deduction(deduction: Deduction, bases: dict[WageBase, Decimal]) -> Decimal:
    """Amount of a deduction for this period."""
    if deduction.kind == DeductionKind.PERCENT_OF_BASIS:
        return deduction.amount * bases[deduction.basis] / HUNDRED
    return deduction.amount


def compute(declaration: WageDeclaration, rules: Optional[TaxRules] = None) -> PayResult:
    """Compute itemized earnings, deductions and totals for a declaration.

    Args:
        declaration: Validated wage declaration
        rules: Tax rules; None uses the packaged defaults

    Returns:
        PayResult. Net pay may be negative; that is a valid estimate.
    """
    if rules is None:
        rules = default_tax_rules()

    components = compute_components(declaration.hours, declaration.rates)
    earnings = derive_earnings(declaration.earnings_items, components)
    reimbursements = declaration.reimbursements

    earnings_total = sum_where(earnings)
    reimbursements_total = sum_where(reimbursements)
    taxable_reimbursements = sum_where(reimbursements, WageBase.TAXABLE)

    bases = {
        base: sum_where(earnings, base) + sum_where(reimbursements, base)
        for base in WageBase
    }

    resolved = [resolve_deduction(d, bases) for d in declaration.deductions]
    other_deductions_total = sum(resolved, ZERO)

    strategy = strategy_for(declaration.tax_config, rules)
    estimated_tax = strategy.estimate_tax(bases[WageBase.TAXABLE], components.overtime_pay)

    gross_pay = earnings_total + reimbursements_total
    net_pay = gross_pay - estimated_tax - other_deductions_total

    logger.debug(
        f"compute: gross={gross_pay} taxable={bases[WageBase.TAXABLE]} "
        f"tax={estimated_tax} deductions={other_deductions_total} net={net_pay}"
    )

    return assemble_result(
        earnings=earnings,
        deductions=declaration.deductions,
        resolved_deductions=resolved,
        components=components,
        tax_label=strategy.label,
        totals={
            "gross_pay": gross_pay,
            "taxable_wage": bases[WageBase.TAXABLE],
            "social_insurance_wage": bases[WageBase.SOCIAL_INSURANCE],
            "health_insurance_wage": bases[WageBase.HEALTH_INSURANCE],
            "estimated_tax": estimated_tax,
            "net_pay": net_pay,
            "non_taxable_reimbursements": reimbursements_total - taxable_reimbursements,
            "earnings_total": earnings_total,
            "reimbursements_total": reimbursements_total,
            "other_deductions_total": other_deductions_total,
            "total_deductions": estimated_tax + other_deductions_total,
        },
    )
