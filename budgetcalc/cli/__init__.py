"""Budget Calc CLI."""
