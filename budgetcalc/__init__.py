"""Budget Calc - household budget derivation from salary, taxes and expenses."""

__version__ = "0.1.0"
