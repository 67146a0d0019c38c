"""Pydantic schemas for tax schedule documents.

These schemas validate the bundled tax_rates_*.yaml files (one per filing
status) and give the calculators typed access to brackets, deductions and
payroll parameters. All models are frozen so a loaded document can be shared
between derivations without being mutated.
"""

import math
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


UNBOUNDED = "INF"


class Bracket(BaseModel):
    """Single marginal-rate bracket covering [lower, upper)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    lower: float = Field(..., ge=0, description="Lower bound of the bracket")
    upper: Optional[float] = Field(
        default=None, ge=0, description="Upper bound (None or 'INF' if unbounded)"
    )
    rate: float = Field(..., ge=0, le=1, description="Marginal rate as decimal")

    @field_validator("upper", mode="before")
    @classmethod
    def _parse_unbounded(cls, value):
        if isinstance(value, str) and value.strip().upper() == UNBOUNDED:
            return None
        return value

    @property
    def upper_bound(self) -> float:
        """Upper bound as a number, infinity for the open top bracket."""
        return math.inf if self.upper is None else self.upper


class FederalTaxSchema(BaseModel):
    """Federal income tax: progressive brackets after a standard deduction."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    brackets: tuple[Bracket, ...]
    standard_deduction: float = Field(default=0, ge=0)


class FicaParameters(BaseModel):
    """Payroll tax parameters (Social Security and Medicare).

    The additional Medicare surtax only applies when both the threshold and
    the rate are present and non-zero.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    oasdi_rate: float = Field(..., ge=0, le=1, description="Social Security rate")
    oasdi_wage_base: float = Field(..., ge=0, description="Social Security wage cap")
    medicare_rate: float = Field(..., ge=0, le=1)
    medicare_addl_threshold: Optional[float] = Field(default=None, ge=0)
    medicare_addl_rate: Optional[float] = Field(default=None, ge=0, le=1)


class NoStateTax(BaseModel):
    """Jurisdiction with no income tax."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["none"] = "none"


class FlatStateTax(BaseModel):
    """Jurisdiction taxing income after its deduction at a single rate."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["flat"] = "flat"
    rate: float = Field(..., ge=0, le=1)
    standard_deduction: float = Field(default=0, ge=0)


class BracketStateTax(BaseModel):
    """Jurisdiction with its own progressive brackets."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["brackets"] = "brackets"
    brackets: tuple[Bracket, ...]
    standard_deduction: float = Field(default=0, ge=0)


StateTaxSchema = Annotated[
    Union[NoStateTax, FlatStateTax, BracketStateTax],
    Field(discriminator="type"),
]


class TaxRatesFile(BaseModel):
    """Complete tax schedule document for one filing status."""

    model_config = ConfigDict(extra="ignore", frozen=True)  # Allow metadata keys

    federal: FederalTaxSchema
    fica: FicaParameters
    states: dict[str, StateTaxSchema] = Field(default_factory=dict)

    @property
    def jurisdictions(self) -> list[str]:
        """Sorted jurisdiction names."""
        return sorted(self.states)
