"""Budget documents and their JSON save files.

A budget file stores the user expense list plus four scalar settings
(salary, filing status, jurisdiction, display timeframe) and an optional
name:

    {
      "version": 1,
      "salaryAnnual": 65000,
      "filingStatus": "single",
      "state": "New Jersey",
      "timeframe": "month",
      "userExpenses": [
        {"id": "...", "kind": "user", "name": "Rent", "color": "#feb53780",
         "amountAnnual": 24000, "isPreTax": false, "order": 0,
         "inputTimeframe": "month"},
        {"id": "...", "kind": "user", "name": "401k", "color": "#4F4680",
         "amountAnnual": 3250, "isPreTax": true, "percentOfSalary": 0.05}
      ],
      "name": "Household"
    }

Percent rules are stored as the flat percentOfSalary / percentOfPostTax
fields and converted to a single ResolutionRule on load. Loading is
forgiving: bad numbers become 0, unknown timeframes fall back to month, and
names are sanitized.
"""

import json
import logging
import math
import re
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .expenses import (
    TIMEFRAME_FACTORS,
    FixedAmount,
    PercentOfPostTax,
    PercentOfSalary,
    Timeframe,
    UserExpense,
    default_color,
    new_expense_id,
    to_annual,
)
from .rates import DEFAULT_JURISDICTION, FILING_STATUSES

logger = logging.getLogger(__name__)


BUDGET_FILE_VERSION = 1
DEFAULT_SALARY = 65000
NEW_BUDGET_SALARY = 100000
DEFAULT_TIMEFRAME = "month"
DEFAULT_FILING_STATUS = "single"


class BudgetFileError(Exception):
    """Raised when a budget file cannot be read or parsed."""
    pass


class Budget(BaseModel):
    """Everything needed to derive and save a budget."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    salary_annual: float = Field(default=DEFAULT_SALARY, ge=0)
    filing_status: Literal["single", "married"] = DEFAULT_FILING_STATUS
    state: str = DEFAULT_JURISDICTION
    timeframe: Timeframe = DEFAULT_TIMEFRAME
    user_expenses: tuple[UserExpense, ...] = ()
    name: Optional[str] = None


def sanitize_name(text: str) -> str:
    """Strip markup and script fragments from a user-entered name."""
    text = re.sub(r"[<>]", "", text or "")
    text = re.sub(r"javascript:", "", text, flags=re.IGNORECASE)
    text = re.sub(r"on\w+=", "", text, flags=re.IGNORECASE)
    return text.strip()


def default_budget(
    state: str = DEFAULT_JURISDICTION,
    filing_status: str = DEFAULT_FILING_STATUS,
    timeframe: str = DEFAULT_TIMEFRAME,
) -> Budget:
    """Starter budget with rent and groceries."""
    return Budget(
        salary_annual=DEFAULT_SALARY,
        filing_status=filing_status,
        state=state,
        timeframe=timeframe,
        user_expenses=(
            UserExpense(id=new_expense_id(), name="Rent", color="#feb53780",
                        input_timeframe="month", order=0,
                        amount_annual=to_annual(2000, "month")),
            UserExpense(id=new_expense_id(), name="Groceries", color="#e3fb4980",
                        input_timeframe="month", order=1,
                        amount_annual=to_annual(400, "month")),
        ),
    )


def new_budget(
    state: str = DEFAULT_JURISDICTION,
    filing_status: str = DEFAULT_FILING_STATUS,
    timeframe: str = DEFAULT_TIMEFRAME,
) -> Budget:
    """Blank budget: default salary, no expenses."""
    return Budget(
        salary_annual=NEW_BUDGET_SALARY,
        filing_status=filing_status,
        state=state,
        timeframe=timeframe,
    )


# =============================================================================
# Dict conversion
# =============================================================================


def _to_number(value: Any) -> float:
    """Coerce a loaded value to a finite number, 0 if not possible."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def expense_to_dict(expense: UserExpense) -> dict:
    """Serialize a user expense in the budget file format."""
    data = {
        "id": expense.id,
        "kind": "user",
        "name": expense.name,
        "color": expense.color,
        "amountAnnual": expense.amount_annual,
        "isPreTax": expense.is_pre_tax,
    }
    if expense.order is not None:
        data["order"] = expense.order
    if expense.input_timeframe is not None:
        data["inputTimeframe"] = expense.input_timeframe
    if expense.percent_of_salary is not None:
        data["percentOfSalary"] = expense.percent_of_salary
    if expense.percent_of_post_tax is not None:
        data["percentOfPostTax"] = expense.percent_of_post_tax
    return data


def expense_from_dict(data: dict, index: int = 0) -> UserExpense:
    """Build a user expense from budget file data, normalizing as it goes."""
    is_pre_tax = bool(data.get("isPreTax", False))
    pct_salary = data.get("percentOfSalary")
    pct_post_tax = data.get("percentOfPostTax")

    rule = FixedAmount()
    if not is_pre_tax and _is_number(pct_post_tax):
        rule = PercentOfPostTax(percent=pct_post_tax)
    elif _is_number(pct_salary):
        rule = PercentOfSalary(percent=pct_salary)

    if is_pre_tax and _is_number(pct_post_tax):
        logger.warning(f"Dropping percentOfPostTax from pre-tax expense '{data.get('name')}'")
    if _is_number(pct_post_tax) and _is_number(pct_salary) and not is_pre_tax:
        logger.warning(f"Expense '{data.get('name')}' has both percentages; using percentOfPostTax")

    input_timeframe = data.get("inputTimeframe")
    if input_timeframe not in TIMEFRAME_FACTORS:
        input_timeframe = None

    order = None
    if not is_pre_tax:
        order = int(_to_number(data.get("order", 0)))

    return UserExpense(
        id=str(data.get("id") or new_expense_id()),
        name=sanitize_name(str(data.get("name") or "")),
        color=str(data.get("color") or default_color(index)),
        amount_annual=max(0.0, _to_number(data.get("amountAnnual"))),
        is_pre_tax=is_pre_tax,
        order=order,
        input_timeframe=input_timeframe,
        rule=rule,
    )


def budget_to_dict(budget: Budget) -> dict:
    """Serialize a budget in the versioned file format."""
    data = {
        "version": BUDGET_FILE_VERSION,
        "salaryAnnual": budget.salary_annual,
        "filingStatus": budget.filing_status,
        "state": budget.state,
        "timeframe": budget.timeframe,
        "userExpenses": [expense_to_dict(e) for e in budget.user_expenses],
    }
    if budget.name:
        data["name"] = budget.name
    return data


def budget_from_dict(data: dict, fallback_state: str = DEFAULT_JURISDICTION) -> Budget:
    """Build a budget from file data.

    Args:
        data: Parsed budget file
        fallback_state: Jurisdiction used when the file has none

    Raises:
        BudgetFileError: If data is not an object or userExpenses is not a list
    """
    if not isinstance(data, dict):
        raise BudgetFileError("Invalid budget file format: expected a JSON object")

    expenses = data.get("userExpenses") or []
    if not isinstance(expenses, list):
        raise BudgetFileError("Invalid budget file format: userExpenses must be a list")

    filing_status = data.get("filingStatus") or DEFAULT_FILING_STATUS
    if filing_status not in FILING_STATUSES:
        logger.warning(f"Unknown filing status '{filing_status}', using {DEFAULT_FILING_STATUS}")
        filing_status = DEFAULT_FILING_STATUS

    timeframe = data.get("timeframe") or DEFAULT_TIMEFRAME
    if timeframe not in TIMEFRAME_FACTORS:
        logger.warning(f"Unknown timeframe '{timeframe}', using {DEFAULT_TIMEFRAME}")
        timeframe = DEFAULT_TIMEFRAME

    return Budget(
        salary_annual=max(0.0, _to_number(data.get("salaryAnnual"))),
        filing_status=filing_status,
        state=str(data.get("state") or fallback_state),
        timeframe=timeframe,
        user_expenses=tuple(
            expense_from_dict(item, i)
            for i, item in enumerate(expenses)
            if isinstance(item, dict)
        ),
        name=sanitize_name(str(data.get("name") or "")) or None,
    )


# =============================================================================
# File I/O
# =============================================================================


def default_budget_path(name: Optional[str] = None) -> Path:
    """Default save location for a budget name in the budgets directory."""
    from .config import get_budgets_dir

    return get_budgets_dir() / f"{sanitize_name(name or '') or 'budget'}.json"


def save_budget(budget: Budget, path: Path) -> Path:
    """Write a budget file (pretty-printed JSON).

    Returns:
        Path to the saved file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(budget_to_dict(budget), f, indent=2)

    logger.debug(f"saved budget: {path} ({len(budget.user_expenses)} expenses)")
    return path


def load_budget(path: Path, fallback_state: str = DEFAULT_JURISDICTION) -> Budget:
    """Read a budget file.

    Raises:
        BudgetFileError: If the file is missing or not a valid budget file
    """
    path = Path(path)
    if not path.exists():
        raise BudgetFileError(f"Budget file not found: {path}")

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise BudgetFileError(
            f"Invalid JSON file format in {path.name}. Please select a valid budget file. ({e})"
        ) from e

    budget = budget_from_dict(data, fallback_state=fallback_state)
    logger.debug(f"loaded budget: {path} ({len(budget.user_expenses)} expenses)")
    return budget
