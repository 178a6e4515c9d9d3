"""Interchangeable tax strategies behind one estimate_tax contract.

The engine asks strategy_for() for a TaxStrategy and calls
estimate_tax(taxable_wage, overtime_pay) on it. Which strategy runs is
decided by the ``strategy`` tag of the TaxConfig alone.
"""

import logging
from decimal import Decimal
from typing import Optional

from .progressive import ZERO, TaxBreakdown, estimate_annual_tax
from .schemas import BracketCreditTaxConfig, FlatRateTaxConfig, PayrollPeriod, TaxRules

logger = logging.getLogger(__name__)


class TaxStrategy:
    """Per-period tax estimate for a taxable wage."""

    label = "Estimated tax"

    def estimate_tax(self, taxable_wage: Decimal, overtime_pay: Decimal = ZERO) -> Decimal:
        raise NotImplementedError


class FlatRateStrategy(TaxStrategy):
    """Flat percentage of the taxable wage.

    ``overtime_rate`` is the legacy surtax on overtime pay; it belongs to
    this strategy only and is never combined with bracket credits.
    """

    def __init__(self, rate: Decimal, overtime_rate: Optional[Decimal] = None):
        self.rate = rate
        self.overtime_rate = overtime_rate

    @property
    def label(self) -> str:
        label = f"Estimated tax {self.rate * 100:.2f}%"
        if self.overtime_rate:
            label += f" + overtime {self.overtime_rate * 100:.2f}%"
        return label

    def estimate_tax(self, taxable_wage: Decimal, overtime_pay: Decimal = ZERO) -> Decimal:
        tax = max(ZERO, taxable_wage) * self.rate
        if self.overtime_rate:
            tax += max(ZERO, overtime_pay) * self.overtime_rate
        return tax

    @classmethod
    def from_config(cls, config: FlatRateTaxConfig, rules: TaxRules) -> "FlatRateStrategy":
        return cls(rate=resolve_flat_rate(config, rules), overtime_rate=config.overtime_rate)


class BracketCreditStrategy(TaxStrategy):
    """Annualized bracket tax with optional general and labor credits."""

    def __init__(self, period: PayrollPeriod, apply_credits: bool, rules: TaxRules):
        self.period = period
        self.apply_credits = apply_credits
        self.rules = rules

    @property
    def label(self) -> str:
        period = self.period.replace("_", "-")
        credits = "with credits" if self.apply_credits else "no credits"
        return f"Estimated payroll tax ({period}, {credits})"

    def breakdown(self, taxable_wage: Decimal) -> TaxBreakdown:
        return estimate_annual_tax(taxable_wage, self.period, self.apply_credits, self.rules)

    def estimate_tax(self, taxable_wage: Decimal, overtime_pay: Decimal = ZERO) -> Decimal:
        return self.breakdown(taxable_wage).period_tax

    @classmethod
    def from_config(cls, config: BracketCreditTaxConfig, rules: TaxRules) -> "BracketCreditStrategy":
        return cls(period=config.payroll_period, apply_credits=config.apply_credits, rules=rules)


STRATEGIES = {
    "flat_rate": FlatRateStrategy,
    "bracket_credit": BracketCreditStrategy,
}


def resolve_flat_rate(config: FlatRateTaxConfig, rules: TaxRules) -> Decimal:
    """Effective rate of a flat-rate config.

    Preset mode looks the rate up in the preset table. An unknown preset id
    is a configuration fault: it is logged and the default preset is used,
    then the config's own rate if no default preset exists either.
    """
    if config.mode == "custom":
        return config.rate

    preset = rules.get_preset(config.preset_id)
    if preset is not None:
        return preset.rate

    fallback = rules.get_preset(rules.defaults.tax_preset_id)
    if fallback is not None:
        logger.warning(f"Unknown tax preset '{config.preset_id}', using '{fallback.id}'")
        return fallback.rate

    logger.warning(f"Unknown tax preset '{config.preset_id}' and no default preset, using rate {config.rate}")
    return config.rate


def strategy_for(tax_config, rules: TaxRules) -> TaxStrategy:
    """Build the strategy selected by ``tax_config.strategy``."""
    return STRATEGIES[tax_config.strategy].from_config(tax_config, rules)
