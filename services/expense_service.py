from datetime import date
from decimal import Decimal
from models.expense import Expense
from database.expense_dao import ExpenseDAO
from utils.currency import to_decimal
from utils.date_helpers import coerce_date, today
from utils.errors import InvalidArgument, NotFound


class ExpenseService:
    def __init__(self, expense_dao: ExpenseDAO):
        self._dao = expense_dao

    def get_for_owner(
        self,
        owner_id: int,
        start: date | None = None,
        end: date | None = None,
        category: str | None = None,
    ) -> list[Expense]:
        return self._dao.get_by_owner(owner_id, start, end, category)

    def get_by_id(self, owner_id: int, expense_id: int) -> Expense:
        expense = self._dao.get_by_id(owner_id, expense_id)
        if expense is None:
            raise NotFound("Expense", expense_id)
        return expense

    def get_categories(self, owner_id: int) -> list[str]:
        return self._dao.get_categories(owner_id)

    def create(
        self,
        owner_id: int,
        category: str,
        amount,
        date=None,
        description: str = "",
    ) -> Expense:
        category, amount, d = self._validate(category, amount, date or today())
        return self._dao.create(owner_id, category, amount, d, description)

    def update(
        self,
        owner_id: int,
        expense_id: int,
        category: str,
        amount,
        date=None,
        description: str = "",
    ) -> Expense:
        current = self.get_by_id(owner_id, expense_id)
        category, amount, d = self._validate(category, amount, date or current.date)
        updated = self._dao.update(owner_id, expense_id, category, amount, d, description)
        if updated is None:
            raise NotFound("Expense", expense_id)
        return updated

    def delete(self, owner_id: int, expense_id: int):
        if not self._dao.delete(owner_id, expense_id):
            raise NotFound("Expense", expense_id)

    def bulk_delete(self, owner_id: int, expense_ids: list[int]) -> int:
        if not expense_ids:
            raise InvalidArgument("No expense ids given.")
        return self._dao.delete_many(owner_id, list(expense_ids))

    def _validate(self, category: str, amount, d) -> tuple[str, Decimal, date]:
        if not category or not category.strip():
            raise InvalidArgument("Category cannot be empty.")
        amount = to_decimal(amount)
        if amount < 0:
            raise InvalidArgument("Amount cannot be negative.")
        return category.strip(), amount, coerce_date(d)
