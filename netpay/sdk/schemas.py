"""Pydantic schemas for wage declarations and pay results.

All schemas use extra='forbid' to reject unknown fields and frozen=True so a
declaration handed to the engine cannot be changed underneath it. Money is
Decimal throughout.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from .taxes.schemas import BracketCreditTaxConfig, Money, Quantity, TaxConfig


# =============================================================================
# Wage components - shared by earnings items and reimbursements
# =============================================================================


class WageBase(str, Enum):
    """Wage bases a component can count toward."""

    TAXABLE = "taxable"
    SOCIAL_INSURANCE = "social_insurance"
    HEALTH_INSURANCE = "health_insurance"


class WageComponent(BaseModel):
    """An amount plus the wage bases it counts toward."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    amount: Money = Field(default=Decimal("0"), ge=0, description="Amount for the period")
    counts_toward: frozenset[WageBase] = Field(
        default=frozenset(),
        description="Wage bases (taxable, social_insurance, health_insurance) this amount is part of",
    )

    @property
    def taxable(self) -> bool:
        return WageBase.TAXABLE in self.counts_toward

    @property
    def counts_toward_social_insurance_wage(self) -> bool:
        return WageBase.SOCIAL_INSURANCE in self.counts_toward

    @property
    def counts_toward_health_insurance_wage(self) -> bool:
        return WageBase.HEALTH_INSURANCE in self.counts_toward

    @field_serializer("counts_toward")
    def _serialize_counts_toward(self, value: frozenset[WageBase]) -> list[str]:
        return sorted(base.value for base in value)


class EarningsType(str, Enum):
    SALARY = "salary"
    HOLIDAY_ALLOWANCE = "holiday_allowance"
    SHIFT_ALLOWANCE = "shift_allowance"
    OTHER_TAXABLE_WORK = "other_taxable_work"


COMPUTED_EARNINGS_TYPES = (EarningsType.SALARY, EarningsType.SHIFT_ALLOWANCE)

EARNINGS_LABELS = {
    EarningsType.SALARY: "Salary",
    EarningsType.HOLIDAY_ALLOWANCE: "Holiday allowance",
    EarningsType.SHIFT_ALLOWANCE: "Shift allowance",
    EarningsType.OTHER_TAXABLE_WORK: "Other taxable work",
}


class EarningsItem(WageComponent):
    """One earnings line.

    For the computed types (salary, shift_allowance) the declared amount is
    ignored; the engine derives it from hours and rates on every run.
    """

    type: EarningsType
    label: Optional[str] = None

    @property
    def display_label(self) -> str:
        return self.label or EARNINGS_LABELS[self.type]

    @property
    def is_computed(self) -> bool:
        return self.type in COMPUTED_EARNINGS_TYPES


class Reimbursement(WageComponent):
    """Expense reimbursement; ``id`` is stable across edits."""

    id: str = Field(..., min_length=1)
    label: str = "Reimbursement"


# =============================================================================
# Deductions
# =============================================================================


class DeductionKind(str, Enum):
    FIXED_AMOUNT = "fixed_amount"
    PERCENT_OF_BASIS = "percent_of_basis"


class Deduction(BaseModel):
    """User deduction.

    For percent_of_basis, ``amount`` is a percentage (10 = 10%) of the wage
    base named by ``basis``. For fixed_amount, ``basis`` is ignored.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1)
    label: str = "Deduction"
    amount: Money = Field(default=Decimal("0"), ge=0)
    kind: DeductionKind = DeductionKind.FIXED_AMOUNT
    basis: WageBase = WageBase.TAXABLE


# =============================================================================
# Hours, rates, declaration
# =============================================================================


class Hours(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    normal: Quantity = Field(default=Decimal("0"), ge=0)
    overtime150: Quantity = Field(default=Decimal("0"), ge=0)
    overtime200: Quantity = Field(default=Decimal("0"), ge=0)
    standby: Quantity = Field(default=Decimal("0"), ge=0)

    @property
    def total(self) -> Decimal:
        return self.normal + self.overtime150 + self.overtime200 + self.standby


class Rates(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    base: Money = Field(default=Decimal("0"), ge=0, description="Base hourly rate")
    standby: Money = Field(default=Decimal("0"), ge=0, description="Standby hourly rate")
    overtime150_multiplier: Quantity = Field(default=Decimal("1.5"), ge=1, le=5)
    overtime200_multiplier: Quantity = Field(default=Decimal("2.0"), ge=1, le=5)


class WageDeclaration(BaseModel):
    """Everything the engine needs for one calculation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    hours: Hours = Hours()
    rates: Rates = Rates()
    earnings_items: tuple[EarningsItem, ...]
    reimbursements: tuple[Reimbursement, ...] = ()
    deductions: tuple[Deduction, ...] = ()
    tax_config: TaxConfig = BracketCreditTaxConfig()

    @model_validator(mode="after")
    def check_items(self) -> "WageDeclaration":
        """Exactly one of each computed earnings type; ids unique."""
        errors = []

        for computed_type in COMPUTED_EARNINGS_TYPES:
            count = sum(1 for item in self.earnings_items if item.type == computed_type)
            if count != 1:
                errors.append(f"expected exactly one {computed_type.value} earnings item, found {count}")

        reimbursement_ids = [r.id for r in self.reimbursements]
        if len(set(reimbursement_ids)) != len(reimbursement_ids):
            errors.append("duplicate reimbursement ids")

        deduction_ids = [d.id for d in self.deductions]
        if len(set(deduction_ids)) != len(deduction_ids):
            errors.append("duplicate deduction ids")

        if errors:
            raise ValueError("; ".join(errors))

        return self


# =============================================================================
# Result
# =============================================================================


class PayLine(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    label: str
    amount: Decimal


class DeductionDetail(BaseModel):
    """Resolved amount of one user deduction."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    label: str
    amount: Decimal


class PayComponents(BaseModel):
    """Pay derived from hours and rates."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base_pay: Decimal
    overtime150_pay: Decimal
    overtime200_pay: Decimal
    standby_pay: Decimal
    shift_allowance_total: Decimal

    @property
    def overtime_pay(self) -> Decimal:
        return self.overtime150_pay + self.overtime200_pay


class PayTotals(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    gross_pay: Decimal
    taxable_wage: Decimal
    social_insurance_wage: Decimal
    health_insurance_wage: Decimal
    estimated_tax: Decimal
    net_pay: Decimal = Field(..., description="May be negative")
    non_taxable_reimbursements: Decimal
    earnings_total: Decimal
    reimbursements_total: Decimal
    other_deductions_total: Decimal
    total_deductions: Decimal


class PayResult(BaseModel):
    """Itemized earnings and deductions plus totals for one declaration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    earnings_lines: tuple[PayLine, ...]
    deduction_lines: tuple[PayLine, ...]
    deduction_details: tuple[DeductionDetail, ...]
    components: PayComponents
    totals: PayTotals
    tax_label: str
