"""Unit tests for expense models and list operations."""

import pytest
from pydantic import ValidationError

from budgetcalc.sdk.expenses import (
    DEFAULT_ROW_COLORS,
    ExpenseNotFoundError,
    FixedAmount,
    PercentOfPostTax,
    PercentOfSalary,
    UserExpense,
    add_expense,
    default_color,
    delete_expenses,
    find_expense,
    from_annual,
    move_expense,
    rename_expense,
    set_amount,
    set_color,
    set_percent_of_post_tax,
    set_percent_of_salary,
    split_expenses,
    to_annual,
)


def user(expense_id, name=None, amount=0.0, pre_tax=False, order=None, rule=None):
    return UserExpense(
        id=expense_id,
        name=name or expense_id.title(),
        color="#abcdef80",
        amount_annual=amount,
        is_pre_tax=pre_tax,
        order=order,
        rule=rule or FixedAmount(),
    )


@pytest.fixture
def expenses():
    """One pre-tax and three post-tax expenses."""
    return [
        user("k401-aaaa", name="401k", amount=5000, pre_tax=True),
        user("rent-bbbb", name="Rent", amount=24000, order=0),
        user("food-cccc", name="Groceries", amount=4800, order=1),
        user("fun-dddd", name="Fun", amount=1200, order=2),
    ]


class TestTimeframes:

    def test_to_annual(self):
        assert to_annual(2000, "month") == 24000
        assert to_annual(100, "biweek") == 2600
        assert to_annual(10, "day") == 3650

    def test_from_annual(self):
        assert from_annual(5200, "week") == 100
        assert from_annual(5200, "year") == 5200

    def test_unknown_timeframe(self):
        with pytest.raises(KeyError):
            to_annual(1, "fortnight")


class TestUserExpenseModel:
    """Tests for the rule/pre-tax constraint."""

    def test_pre_tax_post_tax_percent_rejected(self):
        with pytest.raises(ValidationError, match="cannot be a percent of post-tax"):
            user("x", pre_tax=True, rule=PercentOfPostTax(percent=0.1))

    def test_pre_tax_percent_of_salary_allowed(self):
        e = user("x", pre_tax=True, rule=PercentOfSalary(percent=0.05))
        assert e.percent_of_salary == 0.05
        assert e.percent_of_post_tax is None

    def test_rule_parsed_from_dict(self):
        e = UserExpense.model_validate({
            "id": "x", "name": "Save", "color": "#00000080",
            "rule": {"mode": "pct_post_tax", "percent": 0.2},
        })
        assert isinstance(e.rule, PercentOfPostTax)
        assert e.percent_of_post_tax == 0.2

    def test_defaults_to_fixed(self):
        e = UserExpense(id="x", name="Rent", color="#00000080")
        assert isinstance(e.rule, FixedAmount)
        assert e.amount_annual == 0.0


class TestAddExpense:
    """Tests for add_expense()."""

    def test_fixed_amount(self, expenses):
        result = add_expense(expenses, "Gym", salary_annual=90000, amount=49.6, amount_timeframe="month")
        added = result[-1]
        assert len(result) == 5
        assert added.name == "Gym"
        assert added.amount_annual == 600  # 50 * 12
        assert added.input_timeframe == "month"
        assert isinstance(added.rule, FixedAmount)

    def test_input_list_unchanged(self, expenses):
        add_expense(expenses, "Gym", salary_annual=90000, amount=50)
        assert len(expenses) == 4

    def test_negative_amount_clamped(self):
        added = add_expense([], "Oops", salary_annual=0, amount=-30)[-1]
        assert added.amount_annual == 0

    def test_blank_name(self):
        assert add_expense([], "   ", salary_annual=0)[-1].name == "New expense"

    def test_percent_of_salary(self):
        added = add_expense([], "Charity", salary_annual=80000, define_by="pct_salary", percent=5)[-1]
        assert added.rule == PercentOfSalary(percent=0.05)
        assert added.amount_annual == pytest.approx(4000)

    def test_percent_of_post_tax(self):
        added = add_expense([], "Savings", salary_annual=80000, post_tax_base=60000,
                            define_by="pct_post_tax", percent=25)[-1]
        assert added.rule == PercentOfPostTax(percent=0.25)
        assert added.amount_annual == pytest.approx(15000)

    def test_pre_tax_post_tax_percent_becomes_fixed(self):
        """Pre-tax rows keep the seeded amount but not the post-tax rule."""
        added = add_expense([], "HSA", salary_annual=80000, post_tax_base=60000, is_pre_tax=True,
                            define_by="pct_post_tax", percent=10)[-1]
        assert isinstance(added.rule, FixedAmount)
        assert added.amount_annual == pytest.approx(6000)

    def test_negative_percent_clamped(self):
        added = add_expense([], "X", salary_annual=80000, define_by="pct_salary", percent=-5)[-1]
        assert added.amount_annual == 0.0

    def test_order_counts_post_tax_only(self, expenses):
        added = add_expense(expenses, "Gym", salary_annual=90000)[-1]
        assert added.order == 3

    def test_pre_tax_has_no_order(self, expenses):
        added = add_expense(expenses, "HSA", salary_annual=90000, is_pre_tax=True)[-1]
        assert added.order is None

    def test_default_color_cycles(self, expenses):
        added = add_expense(expenses, "Gym", salary_annual=90000)[-1]
        assert added.color == DEFAULT_ROW_COLORS[4] + "80"
        assert default_color(len(DEFAULT_ROW_COLORS)) == default_color(0)

    def test_unique_ids(self):
        result = add_expense([], "A", salary_annual=0)
        result = add_expense(result, "B", salary_annual=0)
        assert result[0].id != result[1].id

    def test_unknown_define_by(self):
        with pytest.raises(ValueError):
            add_expense([], "A", salary_annual=0, define_by="pct_rent")


class TestEditExpense:
    """Tests for the single-expense edit operations."""

    def test_rename(self, expenses):
        result = rename_expense(expenses, "rent-bbbb", "Mortgage")
        assert result[1].name == "Mortgage"
        assert expenses[1].name == "Rent"

    def test_set_amount_clears_percent(self):
        start = [user("save", rule=PercentOfPostTax(percent=0.3), amount=9000)]
        result = set_amount(start, "save", 250, "week")
        assert result[0].amount_annual == 13000
        assert isinstance(result[0].rule, FixedAmount)

    def test_set_amount_rounds_to_dollar(self, expenses):
        result = set_amount(expenses, "rent-bbbb", 1999.5, "month")
        assert result[1].amount_annual == 24000

    def test_set_percent_of_salary(self, expenses):
        result = set_percent_of_salary(expenses, "k401-aaaa", 6, 100000)
        assert result[0].rule == PercentOfSalary(percent=0.06)
        assert result[0].amount_annual == pytest.approx(6000)
        assert result[0].is_pre_tax

    def test_set_percent_of_post_tax(self, expenses):
        result = set_percent_of_post_tax(expenses, "fun-dddd", 10, 50000)
        assert result[3].rule == PercentOfPostTax(percent=0.1)
        assert result[3].amount_annual == pytest.approx(5000)

    def test_set_percent_of_post_tax_on_pre_tax(self, expenses):
        with pytest.raises(ValueError, match="pre-tax"):
            set_percent_of_post_tax(expenses, "k401-aaaa", 10, 50000)

    def test_set_color_adds_alpha(self, expenses):
        result = set_color(expenses, "rent-bbbb", "#ff0000")
        assert result[1].color == "#ff000080"

    def test_set_color_keeps_existing_alpha(self, expenses):
        result = set_color(expenses, "rent-bbbb", "#ff0000cc")
        assert result[1].color == "#ff0000cc"

    def test_unknown_id(self, expenses):
        with pytest.raises(ExpenseNotFoundError):
            rename_expense(expenses, "missing", "X")
        with pytest.raises(ExpenseNotFoundError):
            set_percent_of_post_tax(expenses, "missing", 10, 50000)


class TestMoveAndDelete:
    """Tests for reordering and deletion."""

    def test_move_down(self, expenses):
        result = move_expense(expenses, "rent-bbbb", "fun-dddd")
        post = [e.id for e in result if not e.is_pre_tax]
        assert post == ["food-cccc", "fun-dddd", "rent-bbbb"]
        assert [e.order for e in result if not e.is_pre_tax] == [0, 1, 2]

    def test_move_up(self, expenses):
        result = move_expense(expenses, "fun-dddd", "rent-bbbb")
        post = [e.id for e in result if not e.is_pre_tax]
        assert post == ["fun-dddd", "rent-bbbb", "food-cccc"]

    def test_move_keeps_pre_tax_first(self, expenses):
        result = move_expense(expenses, "fun-dddd", "rent-bbbb")
        assert result[0].id == "k401-aaaa"
        assert result[0].order is None

    def test_move_pre_tax_rejected(self, expenses):
        with pytest.raises(ExpenseNotFoundError):
            move_expense(expenses, "k401-aaaa", "rent-bbbb")

    def test_delete(self, expenses):
        result = delete_expenses(expenses, ["rent-bbbb", "fun-dddd"])
        assert [e.id for e in result] == ["k401-aaaa", "food-cccc"]

    def test_delete_unknown_ignored(self, expenses):
        assert delete_expenses(expenses, ["nope"]) == expenses


class TestFindAndSplit:

    def test_find_by_id(self, expenses):
        assert find_expense(expenses, "food-cccc").name == "Groceries"

    def test_find_by_prefix(self, expenses):
        assert find_expense(expenses, "foo").id == "food-cccc"

    def test_find_by_name(self, expenses):
        assert find_expense(expenses, "groceries").id == "food-cccc"

    def test_find_ambiguous(self):
        items = [user("abc1"), user("abc2")]
        with pytest.raises(ExpenseNotFoundError, match="matches 2"):
            find_expense(items, "abc")

    def test_find_missing(self, expenses):
        with pytest.raises(ExpenseNotFoundError):
            find_expense(expenses, "zzz")

    def test_split_sorts_post_tax(self):
        items = [user("b", order=2), user("p", pre_tax=True), user("a", order=1)]
        pre, post = split_expenses(items)
        assert [e.id for e in pre] == ["p"]
        assert [e.id for e in post] == ["a", "b"]
