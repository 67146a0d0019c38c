"""Budget derivation: salary + tax schedules + user expenses -> snapshot.

The derivation runs as a strict linear pipeline. Each stage consumes only
the typed result of the stage before it:

    PreTaxStage   resolve pre-tax expenses, pre-tax total, taxable income
    TaxStage      federal, payroll and state tax rows
    PostTaxStage  post-tax base, post-tax expenses, discretionary remainder

Pre-tax expenses may reference salary. Post-tax expenses may reference
salary or the post-tax base. Nothing references discretionary income.

Every accumulation point floors at zero via non_negative(), so negative
expense amounts contribute nothing and overspending zeroes discretionary
instead of going negative.
"""

import logging
import math
from typing import TYPE_CHECKING, Iterable

from pydantic import BaseModel, ConfigDict

from .expenses import (
    TAX_GREYS,
    AnyExpense,
    DiscretionaryExpense,
    PercentOfPostTax,
    PercentOfSalary,
    TaxExpense,
    UserExpense,
    from_annual,
    split_expenses,
)
from .taxes import (
    TaxRatesFile,
    compute_federal_tax,
    compute_fica,
    compute_state_tax,
    non_negative,
)

if TYPE_CHECKING:
    from .budget_file import Budget

logger = logging.getLogger(__name__)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class PreTaxStage(_FrozenModel):
    """Output of stages 1-3: resolved pre-tax rows and taxable income."""

    salary: float
    expenses: tuple[UserExpense, ...]
    total: float
    taxable_income: float


class TaxStage(_FrozenModel):
    """Output of stages 4-5: tax rows in display order and their sum."""

    taxes: tuple[TaxExpense, ...]
    total: float


class PostTaxStage(_FrozenModel):
    """Output of stages 6-9: post-tax base, resolved rows and remainder."""

    base: float
    expenses: tuple[UserExpense, ...]
    total: float
    discretionary: DiscretionaryExpense


class BudgetSnapshot(_FrozenModel):
    """Complete derived budget consumed by the CLI, the MCP server and saves.

    rows is ordered: pre-tax expenses, taxes, post-tax expenses (display
    order), discretionary last.
    """

    salary: float
    pre_tax_total: float
    taxable_income: float
    taxes: tuple[TaxExpense, ...]
    total_taxes: float
    post_tax_base: float
    post_tax_user_total: float
    discretionary: DiscretionaryExpense
    rows: tuple[AnyExpense, ...]


def _sum_floored(amounts: Iterable[float]) -> float:
    return sum((non_negative(a) for a in amounts), 0.0)


def _with_amount(expense: UserExpense, amount_annual: float) -> UserExpense:
    return expense.model_copy(update={"amount_annual": amount_annual})


def resolve_pre_tax_stage(salary: float, expenses: Iterable[UserExpense]) -> PreTaxStage:
    """Resolve pre-tax expenses against salary and compute taxable income."""
    resolved = []
    for expense in expenses:
        if isinstance(expense.rule, PercentOfSalary):
            expense = _with_amount(expense, salary * expense.rule.percent)
        resolved.append(expense)

    total = _sum_floored(e.amount_annual for e in resolved)
    return PreTaxStage(
        salary=salary,
        expenses=tuple(resolved),
        total=total,
        taxable_income=non_negative(salary - total),
    )


def compute_tax_stage(pre_tax: PreTaxStage, rates: TaxRatesFile, jurisdiction: str) -> TaxStage:
    """Build the tax rows for taxable income.

    Order is fixed: federal, OASDI, Medicare, additional Medicare (only when
    positive), state. An unknown jurisdiction is taxed as 'none'.
    """
    income = pre_tax.taxable_income
    federal = compute_federal_tax(income, rates.federal)
    fica = compute_fica(income, rates.fica)
    state = compute_state_tax(income, rates.states.get(jurisdiction))

    taxes = [
        TaxExpense(id="tax_federal", tax_key="federal", name="Federal Income Tax",
                   color=TAX_GREYS["federal"], amount_annual=federal),
        TaxExpense(id="tax_oasdi", tax_key="oasdi", name="FICA (OASDI)",
                   color=TAX_GREYS["oasdi"], amount_annual=fica.oasdi),
        TaxExpense(id="tax_medicare", tax_key="medicare", name="Medicare",
                   color=TAX_GREYS["medicare"], amount_annual=fica.medicare),
    ]

    if fica.medicare_addl > 0:
        taxes.append(
            TaxExpense(id="tax_medicare_addl", tax_key="medicare_addl", name="Additional Medicare",
                       color=TAX_GREYS["medicare_addl"], amount_annual=fica.medicare_addl)
        )

    taxes.append(
        TaxExpense(id="tax_state", tax_key="state", name=f"{jurisdiction} Income Tax",
                   color=TAX_GREYS["state"], amount_annual=state)
    )

    return TaxStage(taxes=tuple(taxes), total=sum((t.amount_annual for t in taxes), 0.0))


def resolve_post_tax_stage(
    pre_tax: PreTaxStage,
    tax: TaxStage,
    expenses: Iterable[UserExpense],
) -> PostTaxStage:
    """Resolve post-tax expenses and the discretionary remainder.

    Percent of post-tax income takes precedence over percent of salary,
    which takes precedence over the stored amount.
    """
    salary = pre_tax.salary
    base = non_negative(salary - pre_tax.total - tax.total)

    resolved = []
    for expense in expenses:
        if isinstance(expense.rule, PercentOfPostTax):
            expense = _with_amount(expense, base * expense.rule.percent)
        elif isinstance(expense.rule, PercentOfSalary):
            expense = _with_amount(expense, salary * expense.rule.percent)
        resolved.append(expense)

    total = _sum_floored(e.amount_annual for e in resolved)
    return PostTaxStage(
        base=base,
        expenses=tuple(resolved),
        total=total,
        discretionary=DiscretionaryExpense(amount_annual=non_negative(base - total)),
    )


def derive(
    salary_annual: float,
    pre_tax_expenses: Iterable[UserExpense],
    post_tax_expenses: Iterable[UserExpense],
    rates: TaxRatesFile,
    jurisdiction: str,
) -> BudgetSnapshot:
    """Derive the full budget snapshot.

    Pure: identical inputs give identical output. Never raises for numeric
    input. Post-tax expenses are placed in display order (stable sort on
    order).

    Args:
        salary_annual: Gross annual salary (negative clamps to 0)
        pre_tax_expenses: Pre-tax user expenses
        post_tax_expenses: Post-tax user expenses
        rates: Tax schedule document for the filing status
        jurisdiction: State name; must already be resolved by the caller

    Returns:
        BudgetSnapshot with aggregates and ordered rows
    """
    salary = non_negative(salary_annual)
    post_tax_ordered = sorted(post_tax_expenses, key=lambda e: e.order or 0)

    pre_tax = resolve_pre_tax_stage(salary, pre_tax_expenses)
    tax = compute_tax_stage(pre_tax, rates, jurisdiction)
    post_tax = resolve_post_tax_stage(pre_tax, tax, post_tax_ordered)

    logger.debug(
        f"derive: salary={salary:.2f} pre_tax={pre_tax.total:.2f} "
        f"taxable={pre_tax.taxable_income:.2f} taxes={tax.total:.2f} "
        f"post_tax_base={post_tax.base:.2f} discretionary={post_tax.discretionary.amount_annual:.2f}"
    )

    return BudgetSnapshot(
        salary=salary,
        pre_tax_total=pre_tax.total,
        taxable_income=pre_tax.taxable_income,
        taxes=tax.taxes,
        total_taxes=tax.total,
        post_tax_base=post_tax.base,
        post_tax_user_total=post_tax.total,
        discretionary=post_tax.discretionary,
        rows=(*pre_tax.expenses, *tax.taxes, *post_tax.expenses, post_tax.discretionary),
    )


def derive_budget(budget: "Budget", rates: TaxRatesFile) -> BudgetSnapshot:
    """Derive a snapshot for a saved budget document."""
    pre_tax, post_tax = split_expenses(budget.user_expenses)
    return derive(budget.salary_annual, pre_tax, post_tax, rates, budget.state)


def effective_tax_rate(snapshot: BudgetSnapshot) -> float:
    """Total taxes as a fraction of salary (0 when salary is 0)."""
    if snapshot.salary <= 0:
        return 0.0
    return snapshot.total_taxes / snapshot.salary


def chart_series(
    snapshot: BudgetSnapshot,
    timeframe: str = "year",
    include_taxes: bool = True,
) -> list[dict]:
    """Pie chart slices for the snapshot rows.

    Rows with a non-positive or non-finite amount are skipped. Without include_taxes only
    post-tax expenses and discretionary income are shown.

    Returns:
        List of dicts with id, name, value (whole dollars per timeframe), color
    """
    series = []
    for row in snapshot.rows:
        if not math.isfinite(row.amount_annual) or row.amount_annual <= 0:
            continue
        if not include_taxes and (row.kind == "tax" or (row.kind == "user" and row.is_pre_tax)):
            continue
        series.append({
            "id": row.id,
            "name": row.name,
            "value": _round_half_up(from_annual(row.amount_annual, timeframe)),
            "color": row.color,
        })
    return series


def percent_of(amount: float, base: float) -> float:
    """amount / base as a fraction, 0 when base is not positive."""
    return amount / base if base > 0 else 0.0


def _round_half_up(amount: float) -> int:
    return int(amount + 0.5)

