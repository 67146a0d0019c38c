"""Display formatting shared by the CLI and the MCP server."""

import math


def currency_rounded(amount: float) -> str:
    """Format as whole US dollars, e.g. 1234.5 -> '$1,235', -20 -> '-$20'."""
    rounded = int(math.floor(amount + 0.5)) if math.isfinite(amount) else 0
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,}"


def percent_hundredth(fraction: float) -> str:
    """Format a fraction as a percentage rounded to the whole percent.

    0.1234 -> '12.00%'. Non-finite input shows as '0.00%'.
    """
    value = fraction if math.isfinite(fraction) else 0.0
    return f"{math.floor(value * 100 + 0.5):.2f}%"
