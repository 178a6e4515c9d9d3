"""Net Pay SDK - Core functionality for take-home pay estimates."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    load_preferences,
    save_preferences,
    set_preference,
    reset_settings,
    Preferences,
    ConfigError,
    PREFERENCE_KEYS,
)

from .schemas import (
    WageBase,
    WageComponent,
    EarningsType,
    EarningsItem,
    Reimbursement,
    DeductionKind,
    Deduction,
    Hours,
    Rates,
    WageDeclaration,
    PayLine,
    DeductionDetail,
    PayComponents,
    PayTotals,
    PayResult,
)

from .engine import (
    compute,
    compute_components,
    derive_earnings,
    sum_where,
    resolve_deduction,
)

from .assembler import assemble_result

from .inputs import (
    build_declaration,
    build_tax_config,
    default_earnings_items,
    hours_warning,
    parse_number,
    clamp,
)

from .export import (
    format_amount,
    result_rows,
    write_result_csv,
)

from .taxes import (
    TaxRules,
    TaxRulesError,
    FlatRateTaxConfig,
    BracketCreditTaxConfig,
    load_tax_rules,
    default_tax_rules,
    estimate_tax,
    estimate_annual_tax,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "load_preferences",
    "save_preferences",
    "set_preference",
    "reset_settings",
    "Preferences",
    "ConfigError",
    "PREFERENCE_KEYS",
    # Schemas
    "WageBase",
    "WageComponent",
    "EarningsType",
    "EarningsItem",
    "Reimbursement",
    "DeductionKind",
    "Deduction",
    "Hours",
    "Rates",
    "WageDeclaration",
    "PayLine",
    "DeductionDetail",
    "PayComponents",
    "PayTotals",
    "PayResult",
    # Engine
    "compute",
    "compute_components",
    "derive_earnings",
    "sum_where",
    "resolve_deduction",
    "assemble_result",
    # Input boundary
    "build_declaration",
    "build_tax_config",
    "default_earnings_items",
    "hours_warning",
    "parse_number",
    "clamp",
    # Export
    "format_amount",
    "result_rows",
    "write_result_csv",
    # Taxes
    "TaxRules",
    "TaxRulesError",
    "FlatRateTaxConfig",
    "BracketCreditTaxConfig",
    "load_tax_rules",
    "default_tax_rules",
    "estimate_tax",
    "estimate_annual_tax",
]
