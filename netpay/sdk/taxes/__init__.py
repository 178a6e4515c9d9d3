"""taxes - Tax configuration and estimation.

Scope:
- Tax rules loading and validation (rules.py, schemas.py)
- Progressive bracket tax with general/labor credits (progressive.py)
- Flat-rate and bracket/credit strategies behind one contract (strategies.py)

Constraints:
- Pure calculation, no settings or file output
- Bracket tables, credits, period factors and presets come from rules YAML,
  never from code

Usage:
    from netpay.sdk.taxes import load_tax_rules, estimate_tax

    rules = load_tax_rules()
    tax = estimate_tax(Decimal("3750"), "monthly", True, rules)
"""

from .schemas import (
    TaxRules,
    TaxBracket,
    TaxPreset,
    TaxConfig,
    FlatRateTaxConfig,
    BracketCreditTaxConfig,
    PayrollPeriod,
)

from .rules import (
    load_tax_rules,
    read_tax_rules,
    default_tax_rules,
    TaxRulesError,
    DEFAULT_RULES_FILE,
)

from .progressive import (
    TaxBreakdown,
    bracket_tax,
    general_credit,
    labor_credit,
    estimate_annual_tax,
    estimate_tax,
)

from .strategies import (
    TaxStrategy,
    FlatRateStrategy,
    BracketCreditStrategy,
    resolve_flat_rate,
    strategy_for,
)

__all__ = [
    # Schemas
    "TaxRules",
    "TaxBracket",
    "TaxPreset",
    "TaxConfig",
    "FlatRateTaxConfig",
    "BracketCreditTaxConfig",
    "PayrollPeriod",
    # Rules
    "load_tax_rules",
    "read_tax_rules",
    "default_tax_rules",
    "TaxRulesError",
    "DEFAULT_RULES_FILE",
    # Progressive model
    "TaxBreakdown",
    "bracket_tax",
    "general_credit",
    "labor_credit",
    "estimate_annual_tax",
    "estimate_tax",
    # Strategies
    "TaxStrategy",
    "FlatRateStrategy",
    "BracketCreditStrategy",
    "resolve_flat_rate",
    "strategy_for",
]
