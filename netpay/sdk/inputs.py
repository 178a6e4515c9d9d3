"""Input boundary: loose user input to a valid WageDeclaration.

Everything a form, CLI file or MCP payload can get wrong is fixed here so
the engine only ever sees valid values:

- numbers accept "." or "," as decimal separator; junk becomes 0
- hours, rates and amounts are clamped at 0
- overtime multipliers fall back to the default when 0/blank and are
  clamped to the configured range
- percentages are clamped to [0, 100], flat tax rates to the configured
  tax_rate_min/tax_rate_max
- missing ids get a fresh uuid, missing labels a default
- the computed earnings items are supplied when absent
- sections or list entries of the wrong shape are reported and skipped
- anything not given falls back to saved preferences, then rules defaults
"""

import logging
import re
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from .config import Preferences
from .schemas import (
    COMPUTED_EARNINGS_TYPES,
    Deduction,
    DeductionKind,
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

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Magnitude bound (powers of ten) for parsed numbers
MAX_EXPONENT = 15

_NUMBER_PREFIX = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

ALL_BASES = frozenset(WageBase)

# Flag names accepted on earnings items and reimbursements
FLAG_FIELDS = {
    "taxable": WageBase.TAXABLE,
    "social_insurance": WageBase.SOCIAL_INSURANCE,
    "health_insurance": WageBase.HEALTH_INSURANCE,
}


def parse_number(value: Any) -> Decimal:
    """Parse a user number, accepting ',' as decimal separator.

    Like a browser's parseFloat, a leading numeric prefix is used ("12 h"
    -> 12). Anything without one, not finite, or of magnitude 1e16 and up
    is 0, as are magnitudes below 1e-15.

    Examples:
        parse_number("12,5")  # Decimal('12.5')
        parse_number("abc")   # Decimal('0')
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return _bounded(value)
    if isinstance(value, int):
        return _bounded(Decimal(value))
    if isinstance(value, float):
        return _bounded(Decimal(repr(value)))

    text = str(value).strip().replace(",", ".", 1)
    match = _NUMBER_PREFIX.match(text)
    if not match:
        return ZERO
    try:
        result = Decimal(match.group(0))
    except InvalidOperation:
        return ZERO
    return _bounded(result)


def _bounded(value: Decimal) -> Decimal:
    if not value.is_finite() or not -MAX_EXPONENT <= value.adjusted() <= MAX_EXPONENT:
        return ZERO
    return value


def parse_bool(value: Any, default: bool) -> bool:
    """Interpret a loose boolean (true/false, yes/no, 1/0)."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on", "y"):
        return True
    if text in ("0", "false", "no", "off", "n", ""):
        return False
    return default


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return min(max(value, low), high)


def _non_negative(value: Any) -> Decimal:
    return max(ZERO, parse_number(value))


def _new_id() -> str:
    return str(uuid.uuid4())


def _mapping(value: Any, name: str) -> dict:
    """``value`` if it is a mapping; anything else is reported and treated as empty."""
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    logger.warning(f"Ignoring {name}: expected a mapping, got {type(value).__name__}")
    return {}


def _entries(value: Any, name: str) -> list[dict]:
    """Mapping entries of a list; other entries are reported and skipped."""
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        logger.warning(f"Ignoring {name}: expected a list, got {type(value).__name__}")
        return []

    entries = []
    for i, entry in enumerate(value, start=1):
        if isinstance(entry, dict):
            entries.append(entry)
        else:
            logger.warning(f"Skipping {name} entry {i}: expected a mapping, got {type(entry).__name__}")
    return entries


def _text(value: Any, default: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return default
    return str(value)


def _parse_flags(raw: dict, default: frozenset) -> frozenset:
    """Wage-base flags from a ``counts_toward`` list or boolean fields."""
    if "counts_toward" in raw:
        flags = set()
        names = raw.get("counts_toward")
        if isinstance(names, str):
            names = [names]
        elif not isinstance(names, (list, tuple)):
            if names is not None:
                logger.warning(f"Ignoring counts_toward: expected a list, got {type(names).__name__}")
            names = []
        for name in names:
            try:
                flags.add(WageBase(name))
            except ValueError:
                logger.warning(f"Ignoring unknown wage base '{name}'")
        return frozenset(flags)

    if not any(name in raw for name in FLAG_FIELDS):
        return default

    return frozenset(
        base for name, base in FLAG_FIELDS.items()
        if parse_bool(raw.get(name), base in default)
    )


def default_earnings_items() -> tuple[EarningsItem, ...]:
    """Standard earnings items, all counting toward every wage base."""
    return tuple(EarningsItem(type=t, counts_toward=ALL_BASES) for t in EarningsType)


def hours_warning(hours: Hours, rules: Optional[TaxRules] = None) -> bool:
    """True when total hours exceed the configured soft maximum."""
    rules = rules or default_tax_rules()
    return hours.total > rules.limits.hours_soft_max


def _build_hours(raw: dict, rules: TaxRules) -> Hours:
    hours = _mapping(raw.get("hours"), "hours")
    normal = _non_negative(hours.get("normal"))

    worked_days = raw.get("worked_days")
    if worked_days not in (None, ""):
        normal = _non_negative(worked_days) * rules.defaults.hours_per_day

    return Hours(
        normal=normal,
        overtime150=_non_negative(hours.get("overtime150")),
        overtime200=_non_negative(hours.get("overtime200")),
        standby=_non_negative(hours.get("standby")),
    )


def _multiplier(rates: dict, key: str, saved: Optional[Decimal], default: Decimal, rules: TaxRules) -> Decimal:
    value = parse_number(rates[key]) if key in rates else (saved if saved is not None else default)
    if not value:
        value = default
    return clamp(value, rules.limits.multiplier_min, rules.limits.multiplier_max)


def _build_rates(raw: dict, rules: TaxRules, preferences: Preferences) -> Rates:
    rates = _mapping(raw.get("rates"), "rates")
    defaults = rules.defaults

    if "standby" in rates:
        standby = _non_negative(rates["standby"])
    elif preferences.standby_rate is not None:
        standby = preferences.standby_rate
    else:
        standby = defaults.standby_rate

    return Rates(
        base=_non_negative(rates.get("base")),
        standby=standby,
        overtime150_multiplier=_multiplier(
            rates, "overtime150_multiplier", preferences.overtime150_multiplier,
            defaults.overtime150_multiplier, rules,
        ),
        overtime200_multiplier=_multiplier(
            rates, "overtime200_multiplier", preferences.overtime200_multiplier,
            defaults.overtime200_multiplier, rules,
        ),
    )


def _build_earnings(raw_items: Any) -> tuple[EarningsItem, ...]:
    entries = _entries(raw_items, "earnings_items")
    if not entries:
        return default_earnings_items()

    items = []
    seen_computed = set()
    for raw in entries:
        try:
            earnings_type = EarningsType(raw.get("type"))
        except ValueError:
            logger.warning(f"Ignoring earnings item with unknown type {raw.get('type')!r}")
            continue

        if earnings_type in COMPUTED_EARNINGS_TYPES:
            if earnings_type in seen_computed:
                logger.warning(f"Ignoring duplicate {earnings_type.value} earnings item")
                continue
            seen_computed.add(earnings_type)

        items.append(EarningsItem(
            type=earnings_type,
            label=_text(raw.get("label"), None),
            amount=_non_negative(raw.get("amount")),
            counts_toward=_parse_flags(raw, ALL_BASES),
        ))

    for computed_type in COMPUTED_EARNINGS_TYPES:
        if computed_type not in seen_computed:
            items.append(EarningsItem(type=computed_type, counts_toward=ALL_BASES))

    return tuple(items)


def _build_reimbursements(raw_items: Any) -> tuple[Reimbursement, ...]:
    items = []
    seen_ids = set()
    for raw in _entries(raw_items, "reimbursements"):
        item_id = _text(raw.get("id"), None) or _new_id()
        if item_id in seen_ids:
            item_id = _new_id()
        seen_ids.add(item_id)

        items.append(Reimbursement(
            id=item_id,
            label=_text(raw.get("label"), "Reimbursement"),
            amount=_non_negative(raw.get("amount")),
            counts_toward=_parse_flags(raw, frozenset()),
        ))
    return tuple(items)


def _build_deductions(raw_items: Any) -> tuple[Deduction, ...]:
    items = []
    seen_ids = set()
    for raw in _entries(raw_items, "deductions"):
        item_id = _text(raw.get("id"), None) or _new_id()
        if item_id in seen_ids:
            item_id = _new_id()
        seen_ids.add(item_id)

        try:
            kind = DeductionKind(raw.get("kind") or DeductionKind.FIXED_AMOUNT)
        except ValueError:
            logger.warning(f"Unknown deduction kind {raw.get('kind')!r}, using fixed_amount")
            kind = DeductionKind.FIXED_AMOUNT

        try:
            basis = WageBase(raw.get("basis") or WageBase.TAXABLE)
        except ValueError:
            logger.warning(f"Unknown deduction basis {raw.get('basis')!r}, using taxable")
            basis = WageBase.TAXABLE

        amount = _non_negative(raw.get("amount"))
        if kind == DeductionKind.PERCENT_OF_BASIS:
            amount = clamp(amount, ZERO, HUNDRED)

        items.append(Deduction(
            id=item_id,
            label=_text(raw.get("label"), "Deduction"),
            amount=amount,
            kind=kind,
            basis=basis,
        ))
    return tuple(items)


def build_tax_config(raw: Any, rules: TaxRules, preferences: Preferences):
    """Tax config from raw input, then saved preferences, then rules defaults."""
    raw = _mapping(raw, "tax_config")
    defaults = rules.defaults
    strategy = raw.get("strategy") or preferences.tax_strategy

    if strategy == "flat_rate":
        preset_id = _text(raw.get("preset_id", preferences.tax_preset_id), None)
        raw_rate = raw.get("rate", preferences.custom_tax_rate)
        mode = raw.get("mode")
        if mode not in ("preset", "custom"):
            mode = "custom" if raw_rate is not None and preset_id is None else "preset"
        if mode == "preset" and preset_id is None:
            preset_id = defaults.tax_preset_id

        raw_overtime = raw.get("overtime_rate", preferences.overtime_tax_rate)
        overtime_rate = None
        if raw_overtime not in (None, ""):
            overtime_rate = clamp(parse_number(raw_overtime), ZERO, Decimal("1"))

        return FlatRateTaxConfig(
            mode=mode,
            preset_id=preset_id,
            rate=clamp(parse_number(raw_rate), rules.limits.tax_rate_min, rules.limits.tax_rate_max),
            overtime_rate=overtime_rate,
        )

    if strategy != "bracket_credit":
        logger.warning(f"Unknown tax strategy {strategy!r}, using bracket_credit")

    period = raw.get("payroll_period") or preferences.payroll_period or defaults.payroll_period
    if not isinstance(period, str) or period not in rules.period_factors:
        logger.warning(f"Unknown payroll period {period!r}, using {defaults.payroll_period}")
        period = defaults.payroll_period

    saved_credits = preferences.apply_credits if preferences.apply_credits is not None else defaults.apply_credits
    apply_credits = parse_bool(raw.get("apply_credits"), saved_credits)

    return BracketCreditTaxConfig(payroll_period=period, apply_credits=apply_credits)


def build_declaration(
    raw: Any,
    rules: Optional[TaxRules] = None,
    preferences: Optional[Preferences] = None,
) -> WageDeclaration:
    """Coerce a loose input dict into a valid WageDeclaration.

    Args:
        raw: Input with optional keys hours, worked_days, rates,
            earnings_items, reimbursements, deductions, tax_config
        rules: Tax rules for limits and defaults (packaged defaults if None)
        preferences: Saved preferences (none if None)

    Returns:
        WageDeclaration ready for compute()
    """
    rules = rules or default_tax_rules()
    preferences = preferences or Preferences()
    raw = _mapping(raw, "declaration")

    return WageDeclaration(
        hours=_build_hours(raw, rules),
        rates=_build_rates(raw, rules, preferences),
        earnings_items=_build_earnings(raw.get("earnings_items")),
        reimbursements=_build_reimbursements(raw.get("reimbursements")),
        deductions=_build_deductions(raw.get("deductions")),
        tax_config=build_tax_config(raw.get("tax_config"), rules, preferences),
    )
