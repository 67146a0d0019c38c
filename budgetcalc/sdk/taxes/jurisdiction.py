"""Federal, state and payroll tax resolution.

Federal and state income tax apply the bracket calculator after each
schedule's own standard deduction. Payroll taxes are NOT brackets: OASDI,
Medicare and the Medicare surtax are each computed against the full payroll
base independently.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from .brackets import compute_bracket_tax, non_negative
from .schemas import (
    BracketStateTax,
    FederalTaxSchema,
    FicaParameters,
    FlatStateTax,
    NoStateTax,
    StateTaxSchema,
)


class FicaBreakdown(BaseModel):
    """Payroll tax components for a year."""

    model_config = ConfigDict(frozen=True)

    oasdi: float
    medicare: float
    medicare_addl: float

    @property
    def total(self) -> float:
        return self.oasdi + self.medicare + self.medicare_addl


def compute_federal_tax(income: float, federal: FederalTaxSchema) -> float:
    """Federal income tax on income after the standard deduction."""
    taxable = non_negative(income - federal.standard_deduction)
    return compute_bracket_tax(taxable, federal.brackets)


def compute_state_tax(income: float, schema: Optional[StateTaxSchema]) -> float:
    """State income tax for a jurisdiction schema.

    A missing or unrecognized schema is treated the same as a 'none'
    schema: zero tax.
    """
    match schema:
        case None | NoStateTax():
            return 0.0
        case FlatStateTax(rate=rate, standard_deduction=deduction):
            return non_negative(income - deduction) * rate
        case BracketStateTax(brackets=brackets, standard_deduction=deduction):
            return compute_bracket_tax(non_negative(income - deduction), brackets)
        case _:
            return 0.0


def compute_fica(income: float, fica: FicaParameters) -> FicaBreakdown:
    """Social Security, Medicare and additional Medicare tax.

    Social Security stops at the wage base; Medicare is uncapped; the surtax
    applies only to income above its threshold.
    """
    base = non_negative(income)
    oasdi = min(base, fica.oasdi_wage_base) * fica.oasdi_rate
    medicare = base * fica.medicare_rate

    medicare_addl = 0.0
    threshold = fica.medicare_addl_threshold
    addl_rate = fica.medicare_addl_rate
    if threshold and addl_rate:
        medicare_addl = non_negative(base - threshold) * addl_rate

    return FicaBreakdown(oasdi=oasdi, medicare=medicare, medicare_addl=medicare_addl)
