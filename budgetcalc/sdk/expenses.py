"""Expense models and pure list operations for managing user expenses.

Three kinds of expense rows exist:

- user: entered by the person building the budget. Either a fixed annual
  amount or a percentage of salary / of post-tax income.
- tax: derived by the engine for each tax component.
- discretionary: the single remainder row, always last.

All amounts are canonical annual dollars (amount_annual). Timeframes are
applied only when displaying or entering values.

The list operations never mutate their input; each returns a new list.
"""

import logging
import uuid
from typing import Annotated, Iterable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)


Timeframe = Literal["year", "month", "biweek", "week", "day"]

TIMEFRAME_FACTORS: dict[str, int] = {
    "year": 1,
    "month": 12,
    "biweek": 26,
    "week": 52,
    "day": 365,
}

TaxKey = Literal["federal", "oasdi", "medicare", "medicare_addl", "state"]

# Semi-transparent greys for derived tax rows
TAX_GREYS: dict[str, str] = {
    "federal": "#64656680",
    "oasdi": "#7b7e8380",
    "medicare": "#9e9f9c80",
    "medicare_addl": "#d4d4d480",
    "state": "#57575780",
}

DISCRETIONARY_COLOR = "#2e7d3280"

DEFAULT_ROW_COLORS = [
    "#4F4680",
    "#0EA580",
    "#10B980",
    "#F59E80",
    "#EF4480",
    "#8B5C80",
    "#22C580",
    "#06B680",
    "#E11D80",
    "#84CC80",
]

# Alpha suffix appended to colors picked as plain #rrggbb
COLOR_ALPHA = "80"

DEFAULT_EXPENSE_NAME = "New expense"


class ExpenseNotFoundError(Exception):
    """Raised when an expense operation targets an unknown id."""
    pass


def to_annual(amount: float, timeframe: str) -> float:
    """Convert an amount entered per timeframe to annual dollars."""
    return amount * TIMEFRAME_FACTORS[timeframe]


def from_annual(amount_annual: float, timeframe: str) -> float:
    """Convert annual dollars to the amount per timeframe."""
    return amount_annual / TIMEFRAME_FACTORS[timeframe]


# =============================================================================
# Resolution rules
# =============================================================================


class FixedAmount(BaseModel):
    """Use the stored annual amount as-is."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: Literal["fixed"] = "fixed"


class PercentOfSalary(BaseModel):
    """Annual amount is a fraction of gross salary."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: Literal["pct_salary"] = "pct_salary"
    percent: float = Field(..., description="Fraction of salary (0.05 = 5%)")


class PercentOfPostTax(BaseModel):
    """Annual amount is a fraction of post-tax income. Post-tax expenses only."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: Literal["pct_post_tax"] = "pct_post_tax"
    percent: float = Field(..., description="Fraction of post-tax base (0.5 = 50%)")


ResolutionRule = Annotated[
    Union[FixedAmount, PercentOfSalary, PercentOfPostTax],
    Field(discriminator="mode"),
]


# =============================================================================
# Expense rows
# =============================================================================


class UserExpense(BaseModel):
    """An expense entered by the user."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["user"] = "user"
    id: str
    name: str
    color: str
    amount_annual: float = 0.0
    is_pre_tax: bool = False
    order: Optional[int] = Field(default=None, description="Display order (post-tax only)")
    input_timeframe: Optional[Timeframe] = None
    rule: ResolutionRule = Field(default_factory=FixedAmount)

    @model_validator(mode="after")
    def check_rule(self) -> "UserExpense":
        """Pre-tax expenses cannot depend on post-tax income."""
        if self.is_pre_tax and isinstance(self.rule, PercentOfPostTax):
            raise ValueError(
                f"Pre-tax expense '{self.name}' cannot be a percent of post-tax income"
            )
        return self

    @property
    def percent_of_salary(self) -> Optional[float]:
        return self.rule.percent if isinstance(self.rule, PercentOfSalary) else None

    @property
    def percent_of_post_tax(self) -> Optional[float]:
        return self.rule.percent if isinstance(self.rule, PercentOfPostTax) else None


class TaxExpense(BaseModel):
    """A tax component derived by the engine. Never persisted."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["tax"] = "tax"
    id: str
    name: str
    color: str
    amount_annual: float
    tax_key: TaxKey


class DiscretionaryExpense(BaseModel):
    """Unallocated post-tax income."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["discretionary"] = "discretionary"
    id: str = "discretionary"
    name: str = "Discretionary Income"
    color: str = DISCRETIONARY_COLOR
    amount_annual: float


AnyExpense = Annotated[
    Union[UserExpense, TaxExpense, DiscretionaryExpense],
    Field(discriminator="kind"),
]


# =============================================================================
# List operations
# =============================================================================


def new_expense_id() -> str:
    return str(uuid.uuid4())


def default_color(index: int) -> str:
    """Default row color for the Nth expense, cycling through the palette."""
    return DEFAULT_ROW_COLORS[index % len(DEFAULT_ROW_COLORS)] + COLOR_ALPHA


def split_expenses(expenses: Iterable[UserExpense]) -> tuple[list[UserExpense], list[UserExpense]]:
    """Split into (pre_tax, post_tax) with post-tax sorted by display order.

    The sort is stable, so post-tax rows without an order keep their
    relative position.
    """
    expenses = list(expenses)
    pre_tax = [e for e in expenses if e.is_pre_tax]
    post_tax = sorted(
        (e for e in expenses if not e.is_pre_tax),
        key=lambda e: e.order or 0,
    )
    return pre_tax, post_tax


def _round_to_dollar(amount: float) -> int:
    """Round to nearest dollar (0.50+ rounds up)."""
    return int(amount + 0.5) if amount >= 0 else int(amount - 0.5)


def _percent_input(percent: float) -> float:
    """Convert a user-entered percentage (5 = 5%) into a fraction."""
    return max(0.0, percent or 0) / 100


def _replace(expenses: list[UserExpense], expense_id: str, **update) -> list[UserExpense]:
    """Return a copy of the list with one expense updated."""
    if not any(e.id == expense_id for e in expenses):
        raise ExpenseNotFoundError(expense_id)

    return [
        e.model_validate({**e.model_dump(), **update}) if e.id == expense_id else e
        for e in expenses
    ]


def add_expense(
    expenses: list[UserExpense],
    name: str,
    salary_annual: float,
    post_tax_base: float = 0.0,
    is_pre_tax: bool = False,
    define_by: Literal["amount", "pct_salary", "pct_post_tax"] = "amount",
    amount: float = 0.0,
    amount_timeframe: str = "month",
    percent: float = 0.0,
    color: Optional[str] = None,
) -> list[UserExpense]:
    """Append a new user expense.

    Args:
        expenses: Current user expense list
        name: Display name (blank becomes "New expense")
        salary_annual: Current salary, used to seed percent-of-salary amounts
        post_tax_base: Current post-tax base, used to seed percent-of-post-tax amounts
        is_pre_tax: True for pre-tax deductions (401k, HSA, ...)
        define_by: 'amount', 'pct_salary' or 'pct_post_tax'
        amount: Amount per amount_timeframe (rounded to whole dollars)
        amount_timeframe: Timeframe the amount was entered in
        percent: Percentage as entered (5 = 5%)
        color: Row color; defaults to the next palette color

    Returns:
        New list with the expense appended

    A pre-tax expense defined as a percent of post-tax income keeps the
    seeded amount as a fixed value, since pre-tax rows cannot reference
    post-tax income.
    """
    name = (name or "").strip() or DEFAULT_EXPENSE_NAME
    rule: ResolutionRule = FixedAmount()

    if define_by == "amount":
        amount_annual = to_annual(max(0, _round_to_dollar(amount or 0)), amount_timeframe)
    elif define_by == "pct_salary":
        pct = _percent_input(percent)
        amount_annual = salary_annual * pct
        rule = PercentOfSalary(percent=pct)
    elif define_by == "pct_post_tax":
        pct = _percent_input(percent)
        amount_annual = post_tax_base * pct
        if not is_pre_tax:
            rule = PercentOfPostTax(percent=pct)
    else:
        raise ValueError(f"Unknown define_by: {define_by}")

    expense = UserExpense(
        id=new_expense_id(),
        name=name,
        color=color or default_color(len(expenses)),
        is_pre_tax=is_pre_tax,
        input_timeframe=amount_timeframe,
        amount_annual=amount_annual,
        rule=rule,
        order=None if is_pre_tax else sum(1 for e in expenses if not e.is_pre_tax),
    )
    logger.debug(f"add_expense: {expense.name} ({expense.rule.mode}) {amount_annual:.2f}/yr")
    return [*expenses, expense]


def rename_expense(expenses: list[UserExpense], expense_id: str, name: str) -> list[UserExpense]:
    return _replace(expenses, expense_id, name=name)


def set_amount(
    expenses: list[UserExpense],
    expense_id: str,
    display_amount: float,
    timeframe: str,
) -> list[UserExpense]:
    """Set a fixed amount entered per timeframe, clearing any percentage."""
    amount = max(0, _round_to_dollar(display_amount or 0))
    return _replace(
        expenses,
        expense_id,
        amount_annual=to_annual(amount, timeframe),
        rule=FixedAmount().model_dump(),
    )


def set_percent_of_salary(
    expenses: list[UserExpense],
    expense_id: str,
    percent: float,
    salary_annual: float,
) -> list[UserExpense]:
    """Define an expense as a percent of salary (5 = 5%)."""
    pct = _percent_input(percent)
    return _replace(
        expenses,
        expense_id,
        amount_annual=salary_annual * pct,
        rule=PercentOfSalary(percent=pct).model_dump(),
    )


def set_percent_of_post_tax(
    expenses: list[UserExpense],
    expense_id: str,
    percent: float,
    post_tax_base: float,
) -> list[UserExpense]:
    """Define a post-tax expense as a percent of post-tax income (50 = 50%).

    Raises:
        ExpenseNotFoundError: If no expense has this id
        ValueError: If the expense is pre-tax
    """
    target = next((e for e in expenses if e.id == expense_id), None)
    if target is None:
        raise ExpenseNotFoundError(expense_id)
    if target.is_pre_tax:
        raise ValueError(f"'{target.name}' is pre-tax and cannot be a percent of post-tax income")

    pct = _percent_input(percent)
    return _replace(
        expenses,
        expense_id,
        amount_annual=post_tax_base * pct,
        rule=PercentOfPostTax(percent=pct).model_dump(),
    )


def set_color(expenses: list[UserExpense], expense_id: str, color: str) -> list[UserExpense]:
    """Set a row color. Plain #rrggbb colors get the standard alpha suffix."""
    if color.startswith("#") and len(color) == 7:
        color = color + COLOR_ALPHA
    return _replace(expenses, expense_id, color=color)


def move_expense(expenses: list[UserExpense], source_id: str, target_id: str) -> list[UserExpense]:
    """Move a post-tax expense to the position of another and renumber orders.

    Pre-tax expenses are not reorderable; they keep their list position ahead
    of the post-tax rows.
    """
    pre_tax, post_tax = split_expenses(expenses)
    ids = [e.id for e in post_tax]
    for expense_id in (source_id, target_id):
        if expense_id not in ids:
            raise ExpenseNotFoundError(f"{expense_id} (not a post-tax expense)")

    moved = post_tax.pop(ids.index(source_id))
    post_tax.insert(ids.index(target_id), moved)

    renumbered = [e.model_copy(update={"order": i}) for i, e in enumerate(post_tax)]
    return [*pre_tax, *renumbered]


def delete_expenses(expenses: list[UserExpense], expense_ids: Iterable[str]) -> list[UserExpense]:
    """Remove expenses by id. Unknown ids are ignored."""
    doomed = set(expense_ids)
    return [e for e in expenses if e.id not in doomed]


def find_expense(expenses: Iterable[UserExpense], key: str) -> UserExpense:
    """Find an expense by exact id, id prefix, or case-insensitive name.

    Raises:
        ExpenseNotFoundError: If nothing matches, or a prefix/name is ambiguous
    """
    expenses = list(expenses)
    for e in expenses:
        if e.id == key:
            return e

    matches = [e for e in expenses if e.id.startswith(key)] or [
        e for e in expenses if e.name.lower() == key.lower()
    ]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise ExpenseNotFoundError(f"'{key}' matches {len(matches)} expenses")
    raise ExpenseNotFoundError(key)
