"""taxes - Income and payroll tax calculation.

Scope:
- Progressive bracket tax (federal and bracket-style states)
- State tax dispatch over the closed none/flat/brackets schema
- Payroll (FICA) taxes: capped OASDI, uncapped Medicare, Medicare surtax

Constraints:
- Pure calculation - no file access, no budget or expense knowledge
- Never raises for numeric input; negatives clamp to zero
- Schedules arrive as validated TaxRatesFile documents (see rates.py)

Usage:
    from budgetcalc.sdk.taxes import compute_federal_tax, compute_fica

    federal = compute_federal_tax(95000, rates.federal)
    fica = compute_fica(95000, rates.fica)
"""

from .brackets import compute_bracket_tax, non_negative

from .jurisdiction import (
    FicaBreakdown,
    compute_federal_tax,
    compute_state_tax,
    compute_fica,
)

from .schemas import (
    Bracket,
    FederalTaxSchema,
    FicaParameters,
    NoStateTax,
    FlatStateTax,
    BracketStateTax,
    StateTaxSchema,
    TaxRatesFile,
)

__all__ = [
    # Brackets
    "compute_bracket_tax",
    "non_negative",
    # Jurisdictions
    "FicaBreakdown",
    "compute_federal_tax",
    "compute_state_tax",
    "compute_fica",
    # Schemas
    "Bracket",
    "FederalTaxSchema",
    "FicaParameters",
    "NoStateTax",
    "FlatStateTax",
    "BracketStateTax",
    "StateTaxSchema",
    "TaxRatesFile",
]
