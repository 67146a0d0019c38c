"""Budget Calc SDK - Core functionality for budget derivation."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    clear_setting,
    get_data_path,
    get_budgets_dir,
    SETTING_KEYS,
)

from .rates import (
    FILING_STATUSES,
    TaxRatesNotFoundError,
    load_tax_rates,
    list_jurisdictions,
    resolve_jurisdiction,
)

from .expenses import (
    TIMEFRAME_FACTORS,
    ExpenseNotFoundError,
    UserExpense,
    TaxExpense,
    DiscretionaryExpense,
    FixedAmount,
    PercentOfSalary,
    PercentOfPostTax,
    to_annual,
    from_annual,
    add_expense,
    rename_expense,
    set_amount,
    set_percent_of_salary,
    set_percent_of_post_tax,
    set_color,
    move_expense,
    delete_expenses,
    find_expense,
    split_expenses,
)

from .budget import (
    BudgetSnapshot,
    derive,
    derive_budget,
    effective_tax_rate,
    chart_series,
    percent_of,
)

from .budget_file import (
    Budget,
    BudgetFileError,
    default_budget,
    new_budget,
    load_budget,
    save_budget,
    budget_to_dict,
    budget_from_dict,
    default_budget_path,
)

from .formatting import currency_rounded, percent_hundredth

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "clear_setting",
    "get_data_path",
    "get_budgets_dir",
    "SETTING_KEYS",
    # Tax rates
    "FILING_STATUSES",
    "TaxRatesNotFoundError",
    "load_tax_rates",
    "list_jurisdictions",
    "resolve_jurisdiction",
    # Expenses
    "TIMEFRAME_FACTORS",
    "ExpenseNotFoundError",
    "UserExpense",
    "TaxExpense",
    "DiscretionaryExpense",
    "FixedAmount",
    "PercentOfSalary",
    "PercentOfPostTax",
    "to_annual",
    "from_annual",
    "add_expense",
    "rename_expense",
    "set_amount",
    "set_percent_of_salary",
    "set_percent_of_post_tax",
    "set_color",
    "move_expense",
    "delete_expenses",
    "find_expense",
    "split_expenses",
    # Derivation
    "BudgetSnapshot",
    "derive",
    "derive_budget",
    "effective_tax_rate",
    "chart_series",
    "percent_of",
    # Budget files
    "Budget",
    "BudgetFileError",
    "default_budget",
    "new_budget",
    "load_budget",
    "save_budget",
    "budget_to_dict",
    "budget_from_dict",
    "default_budget_path",
    # Formatting
    "currency_rounded",
    "percent_hundredth",
]
