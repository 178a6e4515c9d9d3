"""Progressive payroll tax with general and labor credits.

The per-period taxable wage is annualized with the payroll period factor
(12 monthly, 13 four-weekly), run through the marginal bracket table,
reduced by the two wage-dependent credits and divided back to a period
amount. Credits are capped at the gross tax so the result is never a refund.

All arithmetic is Decimal; nothing is rounded here.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from .schemas import GeneralCreditRules, LaborCreditRules, PayrollPeriod, TaxBracket, TaxRules

ZERO = Decimal("0")


class TaxBreakdown(BaseModel):
    """Intermediate values of one annualized tax estimate."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    period_factor: int
    annual_taxable_wage: Decimal
    annual_gross_tax: Decimal
    general_credit: Decimal = ZERO
    labor_credit: Decimal = ZERO
    annual_credits: Decimal = ZERO
    annual_net_tax: Decimal
    period_tax: Decimal


def bracket_tax(annual_taxable_wage: Decimal, brackets: tuple[TaxBracket, ...]) -> Decimal:
    """Integrate the marginal bracket table over an annual wage."""
    tax_owed = ZERO
    previous_bracket_max = ZERO

    for bracket in brackets:
        if bracket.up_to is None:
            income_in_this_bracket = max(ZERO, annual_taxable_wage - previous_bracket_max)
            tax_owed += income_in_this_bracket * bracket.rate
            break

        income_in_this_bracket = max(ZERO, min(annual_taxable_wage, bracket.up_to) - previous_bracket_max)
        tax_owed += income_in_this_bracket * bracket.rate
        previous_bracket_max = bracket.up_to

    return tax_owed


def general_credit(annual_taxable_wage: Decimal, rules: GeneralCreditRules) -> Decimal:
    """General credit: full maximum, reduced linearly above phase_out_start."""
    excess = max(ZERO, annual_taxable_wage - rules.phase_out_start)
    return max(ZERO, rules.max - excess * rules.phase_out_rate)


def labor_credit(annual_taxable_wage: Decimal, rules: LaborCreditRules) -> Decimal:
    """Labor credit: phase-in below phase_in_end, plateau, then phase-out."""
    if annual_taxable_wage < rules.phase_in_end:
        return annual_taxable_wage * rules.phase_in_rate
    if annual_taxable_wage <= rules.plateau_end:
        return rules.max
    return max(ZERO, rules.max - (annual_taxable_wage - rules.plateau_end) * rules.phase_out_rate)


def estimate_annual_tax(
    taxable_wage_per_period: Decimal,
    period: PayrollPeriod,
    apply_credits: bool,
    rules: TaxRules,
) -> TaxBreakdown:
    """Annualize, apply brackets and credits, de-annualize.

    Args:
        taxable_wage_per_period: Taxable wage for one pay period. Negative
            values are treated as 0.
        period: Payroll period, selects the annualization factor
        apply_credits: Whether the general and labor credits apply
        rules: Bracket and credit tables

    Returns:
        TaxBreakdown with annual intermediates and the per-period tax
    """
    factor = rules.periods_per_year(period)
    annual_taxable_wage = max(ZERO, taxable_wage_per_period) * factor
    annual_gross_tax = bracket_tax(annual_taxable_wage, rules.brackets)

    if not apply_credits:
        return TaxBreakdown(
            period_factor=factor,
            annual_taxable_wage=annual_taxable_wage,
            annual_gross_tax=annual_gross_tax,
            annual_net_tax=annual_gross_tax,
            period_tax=annual_gross_tax / factor,
        )

    general = general_credit(annual_taxable_wage, rules.credits.general)
    labor = labor_credit(annual_taxable_wage, rules.credits.labor)
    annual_credits = min(annual_gross_tax, general + labor)
    annual_net_tax = annual_gross_tax - annual_credits

    return TaxBreakdown(
        period_factor=factor,
        annual_taxable_wage=annual_taxable_wage,
        annual_gross_tax=annual_gross_tax,
        general_credit=general,
        labor_credit=labor,
        annual_credits=annual_credits,
        annual_net_tax=annual_net_tax,
        period_tax=annual_net_tax / factor,
    )


def estimate_tax(
    taxable_wage_per_period: Decimal,
    period: PayrollPeriod,
    apply_credits: bool,
    rules: TaxRules,
) -> Decimal:
    """Estimated tax for one pay period. See estimate_annual_tax."""
    return estimate_annual_tax(taxable_wage_per_period, period, apply_credits, rules).period_tax
