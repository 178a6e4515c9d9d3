"""Tests for the progressive bracket/credit tax model.

Expected values are computed by hand from netpay/rules/default.yaml:
brackets 36.93% up to 75518, 49.5% above; general credit 3362 phased out
at 6.63% above 24812; labor credit 8.23% below 11490, 5532 up to 37691,
phased out at 6.5% above that.
"""

from decimal import Decimal

import pytest

from netpay.sdk.taxes import (
    bracket_tax,
    estimate_annual_tax,
    estimate_tax,
    general_credit,
    labor_credit,
)
from netpay.sdk.taxes.schemas import TaxBracket


class TestBracketTax:
    """Bracket integration."""

    def test_wage_in_first_bracket(self, rules):
        assert bracket_tax(Decimal("45000"), rules.brackets) == Decimal("16618.5")

    def test_wage_spanning_both_brackets(self, rules):
        # 75518 * 0.3693 + 24482 * 0.495
        assert bracket_tax(Decimal("100000"), rules.brackets) == Decimal("40007.3874")

    def test_zero_wage(self, rules):
        assert bracket_tax(Decimal("0"), rules.brackets) == 0

    def test_continuity_at_bracket_edge(self, rules):
        """At the first upper bound the full table equals the first bracket alone."""
        edge = rules.brackets[0].up_to
        assert bracket_tax(edge, rules.brackets) == bracket_tax(edge, rules.brackets[:1])

    def test_marginal_rate_changes_after_edge(self, rules):
        edge = rules.brackets[0].up_to
        step = bracket_tax(edge + 1, rules.brackets) - bracket_tax(edge, rules.brackets)
        assert step == rules.brackets[1].rate

    def test_bounded_top_bracket_leaves_excess_untaxed(self):
        brackets = (TaxBracket(up_to=1000, rate=Decimal("0.1")),)
        assert bracket_tax(Decimal("5000"), brackets) == Decimal("100")


class TestCredits:
    """General and labor credit formulas."""

    def test_general_credit_below_phase_out(self, rules):
        assert general_credit(Decimal("20000"), rules.credits.general) == Decimal("3362")

    def test_general_credit_phasing_out(self, rules):
        # 3362 - (45000 - 24812) * 0.0663
        assert general_credit(Decimal("45000"), rules.credits.general) == Decimal("2023.5356")

    def test_general_credit_never_negative(self, rules):
        assert general_credit(Decimal("100000"), rules.credits.general) == 0

    def test_labor_credit_phase_in(self, rules):
        assert labor_credit(Decimal("10000"), rules.credits.labor) == Decimal("823")

    def test_labor_credit_plateau(self, rules):
        assert labor_credit(Decimal("20000"), rules.credits.labor) == Decimal("5532")
        assert labor_credit(rules.credits.labor.plateau_end, rules.credits.labor) == Decimal("5532")

    def test_labor_credit_phase_out(self, rules):
        # 5532 - (45000 - 37691) * 0.065
        assert labor_credit(Decimal("45000"), rules.credits.labor) == Decimal("5056.915")

    def test_labor_credit_never_negative(self, rules):
        assert labor_credit(Decimal("200000"), rules.credits.labor) == 0


class TestEstimateAnnualTax:
    """Full annualize -> brackets -> credits -> de-annualize round trip."""

    def test_monthly_with_credits(self, rules):
        breakdown = estimate_annual_tax(Decimal("3750"), "monthly", True, rules)

        assert breakdown.period_factor == 12
        assert breakdown.annual_taxable_wage == Decimal("45000")
        assert breakdown.annual_gross_tax == Decimal("16618.5")
        assert breakdown.general_credit == Decimal("2023.5356")
        assert breakdown.labor_credit == Decimal("5056.915")
        assert breakdown.annual_credits == Decimal("7080.4506")
        assert breakdown.annual_net_tax == Decimal("9538.0494")
        assert breakdown.period_tax == Decimal("794.83745")

    def test_monthly_without_credits(self, rules):
        breakdown = estimate_annual_tax(Decimal("3750"), "monthly", False, rules)

        assert breakdown.annual_credits == 0
        assert breakdown.annual_net_tax == breakdown.annual_gross_tax
        assert breakdown.period_tax == Decimal("1384.875")

    def test_four_weekly_uses_factor_13(self, rules):
        breakdown = estimate_annual_tax(Decimal("3750"), "four_weekly", False, rules)

        assert breakdown.period_factor == 13
        assert breakdown.annual_taxable_wage == Decimal("48750")
        assert breakdown.annual_gross_tax == Decimal("18003.375")

    def test_credits_capped_at_gross_tax(self, rules):
        """Low wage: credits exceed the tax, result is zero not a refund."""
        breakdown = estimate_annual_tax(Decimal("500"), "monthly", True, rules)

        assert breakdown.general_credit + breakdown.labor_credit > breakdown.annual_gross_tax
        assert breakdown.annual_credits == breakdown.annual_gross_tax
        assert breakdown.period_tax == 0

    @pytest.mark.parametrize("wage", ["0", "250", "1000", "3750", "6293.17", "12000", "40000"])
    def test_credits_never_exceed_gross_tax(self, rules, wage):
        breakdown = estimate_annual_tax(Decimal(wage), "monthly", True, rules)
        assert breakdown.annual_credits <= breakdown.annual_gross_tax
        assert breakdown.period_tax >= 0

    def test_zero_wage(self, rules):
        breakdown = estimate_annual_tax(Decimal("0"), "monthly", True, rules)
        assert breakdown.annual_gross_tax == 0
        assert breakdown.period_tax == 0

    def test_negative_wage_treated_as_zero(self, rules):
        breakdown = estimate_annual_tax(Decimal("-100"), "monthly", True, rules)
        assert breakdown.annual_taxable_wage == 0
        assert breakdown.annual_credits == 0
        assert breakdown.period_tax == 0

    def test_estimate_tax_returns_period_tax(self, rules):
        assert estimate_tax(Decimal("3750"), "monthly", True, rules) == Decimal("794.83745")
