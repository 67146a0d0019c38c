"""Budget Calc CLI - Command-line interface for household budget derivation."""

import logging

import click

from budgetcalc import __version__

from .budget_commands import new as new_command
from .budget_commands import set_values as set_command
from .budget_commands import show as show_command
from .expense_commands import expense as expense_group
from .rates_commands import rates as rates_group
from .settings_commands import settings as settings_group


@click.group()
@click.version_option(version=__version__, prog_name="budget-calc")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose):
    """Budget Calc - Household budget from salary, taxes and expenses.

    Budgets are JSON files holding salary, filing status, state, display
    timeframe and the list of user expenses. Taxes and discretionary income
    are derived every time a budget is shown.

    \b
    Typical flow:
    1. budget-calc new household.json --salary 90000 --state Illinois
    2. budget-calc expense add household.json 401k --pre-tax --pct-salary 6
    3. budget-calc expense add household.json Savings --pct-post-tax 20
    4. budget-calc show household.json --timeframe month
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Add commands and subcommand groups
cli.add_command(show_command)
cli.add_command(new_command)
cli.add_command(set_command)
cli.add_command(expense_group)
cli.add_command(rates_group)
cli.add_command(settings_group)


def main():
    cli()


if __name__ == "__main__":
    main()
