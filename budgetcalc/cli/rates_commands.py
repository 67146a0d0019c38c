"""Tax rates CLI commands."""

import json

import click
from rich.console import Console

from budgetcalc.sdk import FILING_STATUSES, get_setting, list_jurisdictions, resolve_jurisdiction

from .budget_commands import load_rates_or_fail


@click.group("rates")
def rates():
    """Inspect the tax schedules used for derivation.

    One schedule exists per filing status (single, married). Each holds
    federal brackets, payroll tax parameters and per-state schemas.
    """
    pass


@rates.command("states")
@click.option("--filing-status", type=click.Choice(FILING_STATUSES), help="Filing status (default: settings or single).")
def rates_states(filing_status):
    """List jurisdictions and their tax type."""
    filing_status = filing_status or get_setting("filing_status", "single")
    schedule = load_rates_or_fail(filing_status)

    for name in list_jurisdictions(schedule):
        click.echo(f"  {name:<20} {schedule.states[name].type}")


@rates.command("show")
@click.option("--filing-status", type=click.Choice(FILING_STATUSES), help="Filing status (default: settings or single).")
@click.option("--state", help="Jurisdiction to show (default: settings or New Jersey).")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def rates_show(filing_status, state, as_json):
    """Show federal, payroll and state tax rates in use."""
    from .renderers.budget_renderer import render_tax_rates

    filing_status = filing_status or get_setting("filing_status", "single")
    schedule = load_rates_or_fail(filing_status)
    jurisdiction = resolve_jurisdiction(schedule, state or get_setting("state"))

    if as_json:
        output = {
            "filing_status": filing_status,
            "federal": schedule.federal.model_dump(mode="json"),
            "fica": schedule.fica.model_dump(mode="json"),
            "state": {
                "name": jurisdiction,
                "schema": schedule.states[jurisdiction].model_dump(mode="json")
                if jurisdiction in schedule.states else {"type": "none"},
            },
        }
        click.echo(json.dumps(output, indent=2))
        return

    render_tax_rates(Console(), schedule, filing_status, jurisdiction)
