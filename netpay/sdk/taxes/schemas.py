"""Pydantic schemas for tax configuration.

Two kinds of schema live here:

- TaxRules validates a rules YAML (netpay/rules/default.yaml or a user file)
  and gives typed access to brackets, credits, period factors and presets.
- TaxConfig is the per-calculation choice of tax strategy, a tagged union of
  FlatRateTaxConfig and BracketCreditTaxConfig keyed on ``strategy``.
"""

from decimal import Decimal
from typing import Annotated, Literal, Optional, Union, get_args

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


def _to_decimal(value):
    """Convert floats through their repr so 0.3693 stays Decimal('0.3693')."""
    if isinstance(value, float):
        return Decimal(repr(value))
    return value


Money = Annotated[Decimal, BeforeValidator(_to_decimal)]
# Hours, days and multipliers
Quantity = Annotated[Decimal, BeforeValidator(_to_decimal)]
Rate = Annotated[Decimal, BeforeValidator(_to_decimal), Field(ge=0, le=1)]

PayrollPeriod = Literal["monthly", "four_weekly"]


# =============================================================================
# Rules file
# =============================================================================


class TaxBracket(BaseModel):
    """Single marginal bracket. ``up_to`` of None means unbounded."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    up_to: Optional[Money] = Field(default=None, description="Annual upper bound (None for top bracket)")
    rate: Rate = Field(..., description="Marginal rate as decimal")


class GeneralCreditRules(BaseModel):
    """General tax credit: flat maximum, phased out linearly above a threshold."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max: Money = Field(..., ge=0)
    phase_out_start: Money = Field(..., ge=0)
    phase_out_rate: Rate


class LaborCreditRules(BaseModel):
    """Labor tax credit: phase-in, plateau, phase-out."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    phase_in_end: Money = Field(..., ge=0)
    phase_in_rate: Rate
    max: Money = Field(..., ge=0)
    plateau_end: Money = Field(..., ge=0)
    phase_out_rate: Rate

    @model_validator(mode="after")
    def check_zones(self) -> "LaborCreditRules":
        if self.plateau_end < self.phase_in_end:
            raise ValueError(
                f"plateau_end ({self.plateau_end}) must not be below phase_in_end ({self.phase_in_end})"
            )
        return self


class CreditRules(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    general: GeneralCreditRules
    labor: LaborCreditRules


class TaxPreset(BaseModel):
    """Named flat rate offered to the user."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1)
    label: str
    rate: Rate


class Limits(BaseModel):
    """Bounds the input boundary clamps user values to."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    tax_rate_min: Rate = Decimal("0")
    tax_rate_max: Rate = Decimal("0.6")
    hours_soft_max: Quantity = Field(default=Decimal("400"), ge=0)
    multiplier_min: Quantity = Field(default=Decimal("1"), ge=0)
    multiplier_max: Quantity = Field(default=Decimal("5"), ge=0)


class Defaults(BaseModel):
    """Values used when the user has not saved a preference."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    standby_rate: Money = Field(default=Decimal("1.6"), ge=0)
    overtime150_multiplier: Quantity = Decimal("1.5")
    overtime200_multiplier: Quantity = Decimal("2.0")
    tax_preset_id: str = "rate3582"
    payroll_period: PayrollPeriod = "monthly"
    apply_credits: bool = True
    hours_per_day: Quantity = Field(default=Decimal("8"), ge=0)


class TaxRules(BaseModel):
    """Complete tax configuration loaded from a rules YAML."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    period_factors: dict[PayrollPeriod, int]
    brackets: tuple[TaxBracket, ...] = Field(..., min_length=1)
    credits: CreditRules
    presets: tuple[TaxPreset, ...] = ()
    limits: Limits = Limits()
    defaults: Defaults = Defaults()

    @model_validator(mode="after")
    def check_tables(self) -> "TaxRules":
        """Brackets must be strictly increasing with only the last unbounded."""
        errors = []

        for period in get_args(PayrollPeriod):
            if period not in self.period_factors:
                errors.append(f"missing period factor for {period}")
        for period, factor in self.period_factors.items():
            if factor <= 0:
                errors.append(f"period factor for {period} must be positive, got {factor}")

        previous = Decimal("0")
        for i, bracket in enumerate(self.brackets):
            if bracket.up_to is None:
                if i != len(self.brackets) - 1:
                    errors.append(f"bracket {i + 1} is unbounded but is not the last bracket")
                continue
            if bracket.up_to <= previous:
                errors.append(
                    f"bracket {i + 1} upper bound {bracket.up_to} is not above {previous}"
                )
            previous = bracket.up_to

        preset_ids = [p.id for p in self.presets]
        if len(set(preset_ids)) != len(preset_ids):
            errors.append("duplicate preset ids")

        if errors:
            raise ValueError("; ".join(errors))
        return self

    def get_preset(self, preset_id: Optional[str]) -> Optional[TaxPreset]:
        """Look up a preset by id, or None if unknown."""
        for preset in self.presets:
            if preset.id == preset_id:
                return preset
        return None

    def periods_per_year(self, period: PayrollPeriod) -> int:
        """Annualization factor for a payroll period."""
        return self.period_factors[period]


# =============================================================================
# Per-calculation strategy choice
# =============================================================================


class FlatRateTaxConfig(BaseModel):
    """Single percentage on the taxable wage.

    In ``preset`` mode the rate is taken from the preset table and ``rate``
    is only a fallback; in ``custom`` mode ``rate`` is used directly.
    ``overtime_rate`` is an extra surtax on overtime pay.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    strategy: Literal["flat_rate"] = "flat_rate"
    mode: Literal["preset", "custom"] = "custom"
    preset_id: Optional[str] = None
    rate: Rate = Decimal("0")
    overtime_rate: Optional[Rate] = None


class BracketCreditTaxConfig(BaseModel):
    """Annualized bracket tax with optional general and labor credits."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    strategy: Literal["bracket_credit"] = "bracket_credit"
    payroll_period: PayrollPeriod = "monthly"
    apply_credits: bool = True


TaxConfig = Annotated[
    Union[FlatRateTaxConfig, BracketCreditTaxConfig],
    Field(discriminator="strategy"),
]
