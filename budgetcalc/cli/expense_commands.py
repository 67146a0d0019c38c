"""Expense CLI commands: add, edit, reorder and delete user expenses.

EXPENSE arguments accept a full id, a unique id prefix (as shown in the
'show' ID column), or an exact name (case-insensitive).
"""

from pathlib import Path

import click

from budgetcalc.sdk import (
    ExpenseNotFoundError,
    add_expense,
    delete_expenses,
    derive_budget,
    find_expense,
    from_annual,
    move_expense,
    rename_expense,
    save_budget,
    set_amount,
    set_color,
    set_percent_of_post_tax,
    set_percent_of_salary,
)

from .budget_commands import TIMEFRAMES, open_budget


def _find(budget, key):
    try:
        return find_expense(budget.user_expenses, key)
    except ExpenseNotFoundError as e:
        raise click.ClickException(f"Expense not found: {e}")


def _save(path, budget, expenses):
    budget = budget.model_copy(update={"user_expenses": tuple(expenses)})
    save_budget(budget, Path(path))
    return budget


@click.group("expense")
def expense():
    """Manage user expenses in a budget file.

    \b
    Expenses are defined one of three ways:
    - a fixed amount per timeframe (--amount, --per)
    - a percent of salary (--pct-salary)
    - a percent of post-tax income (--pct-post-tax, post-tax expenses only)
    """
    pass


@expense.command("add")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("name")
@click.option("--pre-tax", is_flag=True, help="Deducted before taxes (401k, HSA, ...).")
@click.option("--amount", type=float, help="Fixed amount per --per timeframe.")
@click.option("--per", "per", type=click.Choice(TIMEFRAMES), help="Timeframe for --amount (default: budget's own).")
@click.option("--pct-salary", type=float, help="Percent of salary (5 = 5%).")
@click.option("--pct-post-tax", type=float, help="Percent of post-tax income (50 = 50%).")
@click.option("--color", help="Row color (#rrggbb).")
def expense_add(path, name, pre_tax, amount, per, pct_salary, pct_post_tax, color):
    """Add expense NAME to the budget in PATH."""
    given = [v for v in (amount, pct_salary, pct_post_tax) if v is not None]
    if len(given) > 1:
        raise click.UsageError("Use only one of --amount, --pct-salary, --pct-post-tax")
    if pre_tax and pct_post_tax is not None:
        raise click.UsageError("Pre-tax expenses cannot be a percent of post-tax income")

    budget, rates = open_budget(path)
    snapshot = derive_budget(budget, rates)

    if pct_salary is not None:
        define_by, percent = "pct_salary", pct_salary
    elif pct_post_tax is not None:
        define_by, percent = "pct_post_tax", pct_post_tax
    else:
        define_by, percent = "amount", 0.0

    expenses = add_expense(
        list(budget.user_expenses),
        name=name,
        salary_annual=budget.salary_annual,
        post_tax_base=snapshot.post_tax_base,
        is_pre_tax=pre_tax,
        define_by=define_by,
        amount=amount or 0.0,
        amount_timeframe=per or budget.timeframe,
        percent=percent,
        color=color,
    )
    _save(path, budget, expenses)

    added = expenses[-1]
    click.echo(f"Added {added.name} ({added.id[:8]}): {added.amount_annual:,.2f}/year")


@expense.command("rename")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("expense_key", metavar="EXPENSE")
@click.argument("new_name")
def expense_rename(path, expense_key, new_name):
    """Rename EXPENSE."""
    budget, _ = open_budget(path)
    target = _find(budget, expense_key)
    _save(path, budget, rename_expense(list(budget.user_expenses), target.id, new_name))
    click.echo(f"Renamed {target.name} -> {new_name}")


@expense.command("amount")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("expense_key", metavar="EXPENSE")
@click.argument("amount", type=float)
@click.option("--per", "per", type=click.Choice(TIMEFRAMES), help="Timeframe for AMOUNT (default: budget's own).")
def expense_amount(path, expense_key, amount, per):
    """Set EXPENSE to a fixed AMOUNT, clearing any percentage."""
    budget, _ = open_budget(path)
    target = _find(budget, expense_key)
    timeframe = per or budget.timeframe
    expenses = set_amount(list(budget.user_expenses), target.id, amount, timeframe)
    _save(path, budget, expenses)
    click.echo(f"{target.name}: {from_annual(_amount_of(expenses, target.id), timeframe):,.0f} per {timeframe}")


@expense.command("pct-salary")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("expense_key", metavar="EXPENSE")
@click.argument("percent", type=float)
def expense_pct_salary(path, expense_key, percent):
    """Define EXPENSE as PERCENT of salary (5 = 5%)."""
    budget, _ = open_budget(path)
    target = _find(budget, expense_key)
    expenses = set_percent_of_salary(list(budget.user_expenses), target.id, percent, budget.salary_annual)
    _save(path, budget, expenses)
    click.echo(f"{target.name}: {percent:g}% of salary ({_amount_of(expenses, target.id):,.2f}/year)")


@expense.command("pct-post-tax")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("expense_key", metavar="EXPENSE")
@click.argument("percent", type=float)
def expense_pct_post_tax(path, expense_key, percent):
    """Define post-tax EXPENSE as PERCENT of post-tax income (50 = 50%)."""
    budget, rates = open_budget(path)
    target = _find(budget, expense_key)
    snapshot = derive_budget(budget, rates)
    try:
        expenses = set_percent_of_post_tax(
            list(budget.user_expenses), target.id, percent, snapshot.post_tax_base
        )
    except ValueError as e:
        raise click.ClickException(str(e))
    _save(path, budget, expenses)
    click.echo(f"{target.name}: {percent:g}% of post-tax income ({_amount_of(expenses, target.id):,.2f}/year)")


@expense.command("color")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("expense_key", metavar="EXPENSE")
@click.argument("color")
def expense_color(path, expense_key, color):
    """Set the row COLOR (#rrggbb) of EXPENSE."""
    budget, _ = open_budget(path)
    target = _find(budget, expense_key)
    _save(path, budget, set_color(list(budget.user_expenses), target.id, color))
    click.echo(f"{target.name}: color {color}")


@expense.command("move")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("expense_key", metavar="EXPENSE")
@click.argument("target_key", metavar="TARGET")
def expense_move(path, expense_key, target_key):
    """Move post-tax EXPENSE to the position of post-tax TARGET."""
    budget, _ = open_budget(path)
    source = _find(budget, expense_key)
    target = _find(budget, target_key)
    try:
        expenses = move_expense(list(budget.user_expenses), source.id, target.id)
    except ExpenseNotFoundError as e:
        raise click.ClickException(f"Cannot move: {e}")
    _save(path, budget, expenses)
    click.echo(f"Moved {source.name} to position of {target.name}")


@expense.command("delete")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("expense_keys", metavar="EXPENSE...", nargs=-1, required=True)
def expense_delete(path, expense_keys):
    """Delete one or more expenses."""
    budget, _ = open_budget(path)
    targets = [_find(budget, key) for key in expense_keys]
    _save(path, budget, delete_expenses(list(budget.user_expenses), [t.id for t in targets]))
    for t in targets:
        click.echo(f"Deleted {t.name}")


def _amount_of(expenses, expense_id) -> float:
    return next(e.amount_annual for e in expenses if e.id == expense_id)
