"""Budget Calc MCP Server - FastMCP implementation for budget tools."""

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from budgetcalc.sdk import (
    budget_from_dict,
    chart_series,
    currency_rounded,
    derive_budget,
    effective_tax_rate,
    list_jurisdictions as sdk_list_jurisdictions,
    load_tax_rates,
    percent_hundredth,
    resolve_jurisdiction,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("budget-calc")


# --- Tools ---

@mcp.tool(name="derive_budget")
async def derive_budget_tool(
    salary_annual: float = Field(description="Gross annual salary"),
    filing_status: str = Field(default="single", description="Filing status ('single' or 'married')"),
    state: str | None = Field(default=None, description="Jurisdiction (state) name, e.g. 'New Jersey'"),
    expenses: list[dict[str, Any]] = Field(
        default_factory=list,
        description=(
            "User expenses in budget file format: name, amountAnnual, isPreTax, "
            "and optionally percentOfSalary or percentOfPostTax (fractions, 0.05 = 5%) and order"
        ),
    ),
    timeframe: str = Field(default="year", description="Chart timeframe ('year', 'month', 'biweek', 'week', 'day')"),
) -> dict[str, Any]:
    """Derive a budget: taxes, resolved expenses and discretionary income.

    Returns every row in derivation order (pre-tax, taxes, post-tax,
    discretionary) plus summary totals and chart slices.
    """
    try:
        rates = load_tax_rates(filing_status)
        jurisdiction = resolve_jurisdiction(rates, state)
        budget = budget_from_dict({
            "salaryAnnual": salary_annual,
            "filingStatus": filing_status,
            "state": jurisdiction,
            "timeframe": timeframe,
            "userExpenses": expenses,
        })
        snapshot = derive_budget(budget, rates)

        return {
            "jurisdiction": jurisdiction,
            "snapshot": snapshot.model_dump(mode="json"),
            "chart": chart_series(snapshot, timeframe=budget.timeframe),
            "summary": {
                "salary": currency_rounded(snapshot.salary),
                "total_taxes": currency_rounded(snapshot.total_taxes),
                "effective_tax_rate": percent_hundredth(effective_tax_rate(snapshot)),
                "post_tax_base": currency_rounded(snapshot.post_tax_base),
                "discretionary": currency_rounded(snapshot.discretionary.amount_annual),
            },
        }

    except Exception as e:
        logger.error(f"Error deriving budget: {e}")
        return {"error": str(e), "snapshot": None}


@mcp.tool()
async def list_jurisdictions(
    filing_status: str = Field(default="single", description="Filing status ('single' or 'married')"),
) -> dict[str, Any]:
    """List jurisdictions (states) with their tax type: none, flat or brackets."""
    try:
        rates = load_tax_rates(filing_status)
        return {
            "filing_status": filing_status,
            "jurisdictions": [
                {"name": name, "type": rates.states[name].type}
                for name in sdk_list_jurisdictions(rates)
            ],
        }

    except Exception as e:
        logger.error(f"Error listing jurisdictions: {e}")
        return {"error": str(e), "jurisdictions": []}


@mcp.tool()
async def show_tax_rates(
    filing_status: str = Field(default="single", description="Filing status ('single' or 'married')"),
    state: str | None = Field(default=None, description="Jurisdiction (state) name"),
) -> dict[str, Any]:
    """Get federal brackets, payroll tax parameters and a state's tax schema."""
    try:
        rates = load_tax_rates(filing_status)
        jurisdiction = resolve_jurisdiction(rates, state)
        schema = rates.states.get(jurisdiction)

        return {
            "filing_status": filing_status,
            "federal": rates.federal.model_dump(mode="json"),
            "fica": rates.fica.model_dump(mode="json"),
            "state": {
                "name": jurisdiction,
                "schema": schema.model_dump(mode="json") if schema else {"type": "none"},
            },
        }

    except Exception as e:
        logger.error(f"Error loading tax rates: {e}")
        return {"error": str(e), "federal": None}


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
