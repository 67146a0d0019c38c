"""Rich renderer for derived budgets and tax schedules.

Transforms SDK snapshots into formatted Rich tables.
"""

import re

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box
from rich.markup import escape

from budgetcalc.sdk import (
    Budget,
    BudgetSnapshot,
    chart_series,
    currency_rounded,
    effective_tax_rate,
    from_annual,
    percent_hundredth,
    percent_of,
)
from budgetcalc.sdk.taxes import (
    BracketStateTax,
    FlatStateTax,
    NoStateTax,
    TaxRatesFile,
)

HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}")

ROW_LABELS = {
    "tax": "Tax",
    "discretionary": "Discretionary",
}


def render_budget(
    console: Console,
    budget: Budget,
    snapshot: BudgetSnapshot,
    timeframe: str,
    show_chart: bool = False,
    include_taxes: bool = True,
) -> None:
    """Render a derived budget as Rich tables.

    Args:
        console: Rich Console instance
        budget: The budget document (for name, filing status, jurisdiction)
        snapshot: SDK output from derive_budget()
        timeframe: Display timeframe for amounts
        show_chart: Also render the pie chart series
        include_taxes: Include taxes and pre-tax rows in the chart series
    """
    _render_summary(console, budget, snapshot, timeframe)
    _render_rows(console, snapshot, timeframe)

    if show_chart:
        _render_chart(console, snapshot, timeframe, include_taxes)


def _render_summary(console: Console, budget: Budget, snapshot: BudgetSnapshot, timeframe: str) -> None:
    """Render the summary panel."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value", justify="right")

    table.add_row("Filing status", budget.filing_status)
    table.add_row("Jurisdiction", budget.state)
    table.add_row("Salary", _fmt(snapshot.salary, timeframe))
    table.add_row("Pre-tax deductions", _fmt(snapshot.pre_tax_total, timeframe))
    table.add_row("Taxable income", _fmt(snapshot.taxable_income, timeframe))
    table.add_row(
        "Total taxes",
        f"{_fmt(snapshot.total_taxes, timeframe)} ({percent_hundredth(effective_tax_rate(snapshot))})",
    )
    table.add_row("Post-tax income", _fmt(snapshot.post_tax_base, timeframe))
    table.add_row("Post-tax expenses", _fmt(snapshot.post_tax_user_total, timeframe))
    table.add_row(
        "[green]Discretionary[/green]",
        f"[green]{_fmt(snapshot.discretionary.amount_annual, timeframe)}[/green]",
    )

    title = budget.name or "Budget"
    console.print(Panel(table, title=f"{title} (per {timeframe})", border_style="dim"))


def _render_rows(console: Console, snapshot: BudgetSnapshot, timeframe: str) -> None:
    """Render one line per row in derivation order."""
    table = Table(title="Breakdown", box=box.ROUNDED)
    table.add_column("", width=2)
    table.add_column("Expense", style="bold", min_width=22)
    table.add_column("Type")
    table.add_column("ID", style="dim")
    table.add_column(f"Per {timeframe}", justify="right", min_width=10)
    table.add_column("% Salary", justify="right")
    table.add_column("% Post-tax", justify="right")
    table.add_column("Defined by", style="dim")

    for row in snapshot.rows:
        pct_salary = percent_hundredth(percent_of(row.amount_annual, snapshot.salary))
        pct_post_tax = ""
        defined_by = ""

        if row.kind == "user":
            label = "Pre-tax" if row.is_pre_tax else "Post-tax"
            if not row.is_pre_tax:
                pct_post_tax = percent_hundredth(percent_of(row.amount_annual, snapshot.post_tax_base))
            defined_by = _describe_rule(row)
            row_id = row.id[:8]
        else:
            label = ROW_LABELS[row.kind]
            row_id = ""

        style = "dim" if row.kind == "tax" else ("green" if row.kind == "discretionary" else None)
        table.add_row(
            _swatch(row.color),
            escape(row.name),
            label,
            row_id,
            _fmt(row.amount_annual, timeframe),
            pct_salary,
            pct_post_tax,
            defined_by,
            style=style,
        )

    console.print(table)


def _render_chart(console: Console, snapshot: BudgetSnapshot, timeframe: str, include_taxes: bool) -> None:
    """Render chart slices as a proportional bar list."""
    series = chart_series(snapshot, timeframe=timeframe, include_taxes=include_taxes)
    total = sum(s["value"] for s in series) or 1

    table = Table(title="Allocation", box=box.SIMPLE)
    table.add_column("", width=2)
    table.add_column("Slice")
    table.add_column("Value", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("", min_width=20)

    for s in series:
        share = s["value"] / total
        table.add_row(
            _swatch(s["color"]),
            escape(s["name"]),
            currency_rounded(s["value"]),
            percent_hundredth(share),
            "█" * max(1, round(share * 20)),
        )

    console.print(table)


def render_tax_rates(console: Console, rates: TaxRatesFile, filing_status: str, jurisdiction: str) -> None:
    """Render the federal, payroll and state schedules in use."""
    federal = Table(title=f"Federal brackets ({filing_status})", box=box.ROUNDED)
    federal.add_column("From", justify="right")
    federal.add_column("To", justify="right")
    federal.add_column("Rate", justify="right")
    for b in rates.federal.brackets:
        federal.add_row(currency_rounded(b.lower), _upper(b.upper), _rate(b.rate))
    federal.caption = f"Standard deduction: {currency_rounded(rates.federal.standard_deduction)}"
    console.print(federal)

    fica = rates.fica
    payroll = Table(show_header=False, box=None, padding=(0, 2))
    payroll.add_column("key", style="dim")
    payroll.add_column("value", justify="right")
    payroll.add_row("OASDI", f"{_rate(fica.oasdi_rate)} up to {currency_rounded(fica.oasdi_wage_base)}")
    payroll.add_row("Medicare", _rate(fica.medicare_rate))
    if fica.medicare_addl_threshold and fica.medicare_addl_rate:
        payroll.add_row(
            "Additional Medicare",
            f"{_rate(fica.medicare_addl_rate)} over {currency_rounded(fica.medicare_addl_threshold)}",
        )
    console.print(Panel(payroll, title="Payroll taxes", border_style="dim"))

    schema = rates.states.get(jurisdiction)
    match schema:
        case None | NoStateTax():
            console.print(f"[bold]{jurisdiction}[/bold]: no state income tax")
        case FlatStateTax(rate=rate, standard_deduction=deduction):
            console.print(
                f"[bold]{jurisdiction}[/bold]: flat {_rate(rate)} "
                f"after {currency_rounded(deduction)} deduction"
            )
        case BracketStateTax(brackets=brackets, standard_deduction=deduction):
            state = Table(title=f"{jurisdiction} brackets", box=box.ROUNDED)
            state.add_column("From", justify="right")
            state.add_column("To", justify="right")
            state.add_column("Rate", justify="right")
            for b in brackets:
                state.add_row(currency_rounded(b.lower), _upper(b.upper), _rate(b.rate))
            state.caption = f"Standard deduction: {currency_rounded(deduction)}"
            console.print(state)


def _describe_rule(expense) -> str:
    if expense.percent_of_post_tax is not None:
        return f"{expense.percent_of_post_tax * 100:g}% of post-tax"
    if expense.percent_of_salary is not None:
        return f"{expense.percent_of_salary * 100:g}% of salary"
    return "amount"


def _swatch(color: str) -> str:
    """Colored block for a row color (alpha suffix ignored)."""
    match = HEX_COLOR.match(color or "")
    if not match:
        return ""
    return f"[{match.group(0)}]■[/]"


def _fmt(amount_annual: float, timeframe: str) -> str:
    """Format an annual amount in the display timeframe."""
    return currency_rounded(from_annual(amount_annual, timeframe))


def _upper(upper) -> str:
    return "∞" if upper is None else currency_rounded(upper)


def _rate(rate: float) -> str:
    return f"{rate * 100:.4g}%"
