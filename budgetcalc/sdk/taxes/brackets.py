"""Progressive bracket tax and the shared floor-at-zero combinator."""

import math
from typing import Iterable

from .schemas import Bracket


def non_negative(value: float) -> float:
    """Clamp a value to zero from below.

    NaN (e.g. from infinite inputs cancelling out) also clamps to zero so
    downstream sums never turn into NaN.
    """
    if math.isnan(value) or value <= 0:
        return 0.0
    return float(value)


def compute_bracket_tax(taxable_income: float, brackets: Iterable[Bracket]) -> float:
    """Calculate marginal-rate tax over ascending, non-overlapping brackets.

    Each bracket taxes the slice of income between its lower and upper
    bounds. Negative income is treated as zero. Malformed bracket sets are
    not validated.

    Example:
        brackets [0-10000 @ 10%, 10000-INF @ 20%], income 95000
        -> 10000 * 0.10 + 85000 * 0.20 = 18000
    """
    base = non_negative(taxable_income)
    tax = 0.0

    for bracket in brackets:
        if base <= bracket.lower:
            break
        taxed = min(base, bracket.upper_bound) - bracket.lower
        if taxed > 0:
            tax += taxed * bracket.rate

    return non_negative(tax)
