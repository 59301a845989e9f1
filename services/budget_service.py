from models.budget import Budget
from database.budget_dao import BudgetDAO
from database.expense_dao import ExpenseDAO
from services import aggregation
from utils.currency import to_decimal
from utils.date_helpers import current_month_str, month_bounds
from utils.errors import InvalidArgument, NotFound


class BudgetService:
    def __init__(self, budget_dao: BudgetDAO, expense_dao: ExpenseDAO):
        self._budget_dao = budget_dao
        self._expense_dao = expense_dao

    def get_all(self, owner_id: int) -> list[Budget]:
        return self._budget_dao.get_by_owner(owner_id)

    def get_budget_status(self, owner_id: int, month: str | None = None) -> list[Budget]:
        """Return all budgets with the month's spent amounts filled in."""
        start, end = month_bounds(month or current_month_str())
        expenses = self._expense_dao.get_by_owner(owner_id, start, end)
        return aggregation.budget_status(self._budget_dao.get_by_owner(owner_id), expenses)

    def upsert(self, owner_id: int, category: str, limit_amount) -> Budget:
        """Create the category's budget or replace its limit; one budget per category."""
        if not category or not category.strip():
            raise InvalidArgument("Category cannot be empty.")
        limit_amount = to_decimal(limit_amount, "Budget limit")
        if limit_amount < 0:
            raise InvalidArgument("Budget limit must be non-negative.")
        return self._budget_dao.upsert(owner_id, category.strip(), limit_amount)

    def update_limit(self, owner_id: int, budget_id: int, limit_amount) -> Budget:
        limit_amount = to_decimal(limit_amount, "Budget limit")
        if limit_amount < 0:
            raise InvalidArgument("Budget limit must be non-negative.")
        budget = self._budget_dao.update_limit(owner_id, budget_id, limit_amount)
        if budget is None:
            raise NotFound("Budget", budget_id)
        return budget

    def delete(self, owner_id: int, budget_id: int):
        if not self._budget_dao.delete(owner_id, budget_id):
            raise NotFound("Budget", budget_id)
