"""Budget CLI commands: create, adjust and show budget files."""

import json
import math
from pathlib import Path

import click
from rich.console import Console

from budgetcalc.sdk import (
    FILING_STATUSES,
    TIMEFRAME_FACTORS,
    Budget,
    BudgetFileError,
    TaxRatesNotFoundError,
    budget_to_dict,
    chart_series,
    default_budget,
    default_budget_path,
    derive_budget,
    get_setting,
    load_budget,
    load_tax_rates,
    new_budget,
    resolve_jurisdiction,
    save_budget,
)
from budgetcalc.sdk.taxes import TaxRatesFile


TIMEFRAMES = list(TIMEFRAME_FACTORS)


def validate_salary(ctx, param, value):
    """Reject infinite or NaN salaries; clamp negatives to 0."""
    if value is None:
        return None
    if not math.isfinite(value):
        raise click.BadParameter("Salary must be a finite number.")
    return max(0.0, value)


def load_rates_or_fail(filing_status: str) -> TaxRatesFile:
    """Load tax rates, converting SDK errors to ClickException."""
    try:
        return load_tax_rates(filing_status)
    except TaxRatesNotFoundError as e:
        raise click.ClickException(str(e))


def open_budget(path) -> tuple[Budget, TaxRatesFile]:
    """Load a budget file and its tax rates, resolving the jurisdiction.

    Raises:
        click.ClickException: If the file or tax rates cannot be loaded
    """
    try:
        budget = load_budget(Path(path))
    except BudgetFileError as e:
        raise click.ClickException(str(e))

    rates = load_rates_or_fail(budget.filing_status)
    state = resolve_jurisdiction(rates, budget.state)
    if state != budget.state:
        click.secho(f"Note: '{budget.state}' not found for {budget.filing_status}, using {state}", fg="yellow", err=True)
        budget = budget.model_copy(update={"state": state})

    return budget, rates


@click.command("show")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--timeframe", "-t", type=click.Choice(TIMEFRAMES), help="Display timeframe (default: budget's own).")
@click.option("--chart", is_flag=True, help="Also show the allocation chart.")
@click.option("--taxes/--no-taxes", "include_taxes", default=True,
              help="Include taxes and pre-tax rows in the chart (default: include).")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def show(path, timeframe, chart, include_taxes, as_json):
    """Derive and show the budget in PATH.

    Rows appear in derivation order: pre-tax expenses, taxes, post-tax
    expenses, then discretionary income.
    """
    from .renderers.budget_renderer import render_budget

    budget, rates = open_budget(path)
    timeframe = timeframe or budget.timeframe
    snapshot = derive_budget(budget, rates)

    if as_json:
        output = {
            "budget": budget_to_dict(budget),
            "snapshot": snapshot.model_dump(mode="json"),
            "chart": chart_series(snapshot, timeframe=timeframe, include_taxes=include_taxes),
        }
        click.echo(json.dumps(output, indent=2))
        return

    render_budget(Console(), budget, snapshot, timeframe, show_chart=chart, include_taxes=include_taxes)


@click.command("new")
@click.argument("path", required=False, type=click.Path(dir_okay=False))
@click.option("--name", help="Budget name (also names the file when PATH is omitted).")
@click.option("--salary", type=float, callback=validate_salary, help="Annual salary.")
@click.option("--filing-status", type=click.Choice(FILING_STATUSES), help="Filing status.")
@click.option("--state", help="Jurisdiction (state) name.")
@click.option("--timeframe", type=click.Choice(TIMEFRAMES), help="Display timeframe.")
@click.option("--empty", is_flag=True, help="Start without the sample rent and groceries expenses.")
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
def new(path, name, salary, filing_status, state, timeframe, empty, force):
    """Create a new budget file.

    Defaults come from settings (filing_status, state, timeframe). Without
    PATH the file is created in the budgets directory.

    \b
    Examples:
        budget-calc new household.json --salary 120000 --state California
        budget-calc new --name household --empty
    """
    filing_status = filing_status or get_setting("filing_status", "single")
    timeframe = timeframe or get_setting("timeframe", "month")
    rates = load_rates_or_fail(filing_status)
    state = resolve_jurisdiction(rates, state or get_setting("state"))

    factory = new_budget if empty else default_budget
    budget = factory(state=state, filing_status=filing_status, timeframe=timeframe)

    update = {}
    if salary is not None:
        update["salary_annual"] = salary
    if name:
        update["name"] = name
    if update:
        budget = budget.model_copy(update=update)

    target = Path(path) if path else default_budget_path(name)
    if target.exists() and not force:
        raise click.ClickException(f"File exists: {target} (use --force to overwrite)")

    save_budget(budget, target)
    click.echo(f"Created budget: {target}")
    click.echo(f"  Salary: {budget.salary_annual:,.0f}  Filing: {filing_status}  State: {state}")


@click.command("set")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", help="Budget name.")
@click.option("--salary", type=float, callback=validate_salary, help="Annual salary.")
@click.option("--filing-status", type=click.Choice(FILING_STATUSES), help="Filing status.")
@click.option("--state", help="Jurisdiction (state) name.")
@click.option("--timeframe", type=click.Choice(TIMEFRAMES), help="Display timeframe.")
def set_values(path, name, salary, filing_status, state, timeframe):
    """Change salary, filing status, jurisdiction, timeframe or name.

    Switching filing status keeps the jurisdiction when the new schedule
    has it, otherwise falls back to the default jurisdiction.
    """
    budget, _ = open_budget(path)

    update = {}
    if name is not None:
        update["name"] = name or None
    if salary is not None:
        update["salary_annual"] = salary
    if timeframe:
        update["timeframe"] = timeframe

    filing_status = filing_status or budget.filing_status
    if filing_status != budget.filing_status or state:
        rates = load_rates_or_fail(filing_status)
        if state and state not in rates.states:
            raise click.ClickException(
                f"Unknown state '{state}' for {filing_status}. "
                f"Run 'budget-calc rates states' to list jurisdictions."
            )
        update["filing_status"] = filing_status
        update["state"] = resolve_jurisdiction(rates, state or budget.state)

    if not update:
        click.echo("Nothing to change.")
        return

    budget = Budget.model_validate({**budget.model_dump(), **update})
    save_budget(budget, Path(path))
    for key, value in update.items():
        click.echo(f"Set {key}: {value}")
