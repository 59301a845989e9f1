"""Stateless aggregation over a ledger snapshot.

Every function takes the records it needs as arguments and returns a new
value; nothing here reads storage or keeps state between calls.
"""
from collections.abc import Iterable
from decimal import Decimal

from models.budget import Budget
from models.expense import Expense
from models.income import Income
from models.report import FinancialReport, SavingsStatus
from utils.constants import (
    SUGGESTION_GOAL_PENDING,
    SUGGESTION_GOAL_REACHED,
    SUGGESTION_OVER_BUDGET,
    SUGGESTION_UNDER_BUDGET,
)
from utils.currency import format_currency, to_decimal
from utils.errors import InvalidArgument

ZERO = Decimal("0")


def _non_negative(value, field: str) -> Decimal:
    amount = to_decimal(value, field)
    if amount < 0:
        raise InvalidArgument(f"{field} cannot be negative.")
    return amount


def total_expenses(expenses: Iterable[Expense]) -> Decimal:
    return sum((e.amount for e in expenses), ZERO)


def total_income(incomes: Iterable[Income]) -> Decimal:
    return sum((i.amount for i in incomes), ZERO)


def category_total(expenses: Iterable[Expense], category: str) -> Decimal:
    """Sum for one category; 0 when the category does not appear."""
    return sum((e.amount for e in expenses if e.category == category), ZERO)


def expenses_by_category(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for e in expenses:
        totals[e.category] = totals.get(e.category, ZERO) + e.amount
    return totals


def largest_category(by_category: dict[str, Decimal]) -> tuple[str, Decimal] | None:
    if not by_category:
        return None
    return max(by_category.items(), key=lambda item: (item[1], item[0]))


def is_over_budget(total: Decimal, limit) -> bool:
    return total > _non_negative(limit, "Spending limit")


def savings_status(income, total_spent, goal) -> SavingsStatus:
    goal = _non_negative(goal, "Savings goal")
    current = to_decimal(income, "Income") - to_decimal(total_spent, "Expenses")
    return SavingsStatus(
        current_savings=current,
        is_reached=current >= goal,
        remaining=max(ZERO, goal - current),
    )


def savings_rate(income: Decimal, total_spent: Decimal) -> float:
    """Share of income kept as savings, 0.0 when there is no income."""
    if income <= 0:
        return 0.0
    return float((income - total_spent) / income)


def budget_suggestion(over_budget: bool) -> str:
    return SUGGESTION_OVER_BUDGET if over_budget else SUGGESTION_UNDER_BUDGET


def savings_suggestion(status: SavingsStatus, currency_symbol: str = "$") -> str:
    if status.is_reached:
        return SUGGESTION_GOAL_REACHED
    return SUGGESTION_GOAL_PENDING.format(
        remaining=format_currency(status.remaining, currency_symbol)
    )


def report(income, expenses: list[Expense], limit, goal) -> FinancialReport:
    """Assemble the financial report for one owner's snapshot.

    ``income`` is the total income for the period; ``limit`` and ``goal`` must
    be non-negative or InvalidArgument is raised.
    """
    limit = _non_negative(limit, "Spending limit")
    goal = _non_negative(goal, "Savings goal")
    income = to_decimal(income, "Income")

    by_category = expenses_by_category(expenses)
    total = total_expenses(expenses)
    status = savings_status(income, total, goal)
    over = is_over_budget(total, limit)
    return FinancialReport(
        income=income,
        expenses_by_category=by_category,
        total_expenses=total,
        savings_status=status,
        is_over_budget=over,
        suggestions=[budget_suggestion(over), savings_suggestion(status)],
    )


def budget_status(budgets: Iterable[Budget], expenses: list[Expense]) -> list[Budget]:
    """Return copies of budgets with spent_amount filled in from expenses."""
    spending = expenses_by_category(expenses)
    return [
        Budget(
            id=b.id,
            owner_id=b.owner_id,
            category=b.category,
            limit_amount=b.limit_amount,
            spent_amount=spending.get(b.category, ZERO),
        )
        for b in budgets
    ]
