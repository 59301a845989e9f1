"""Narrow data-access interface used by the recurring processor.

Groups the four operations ``process_due`` needs behind one object so the
processor never touches SQL, and exposes ``transaction()`` as the atomic
scope for a ledger insert plus its schedule update.
"""
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Iterator

from database.db_manager import DatabaseManager
from database.expense_dao import ExpenseDAO
from database.income_dao import IncomeDAO
from database.recurring_dao import RecurringDAO
from models.expense import Expense
from models.income import Income
from models.recurring_transaction import RecurringTransaction
from utils.errors import ConcurrencyConflict


class LedgerStore:
    def __init__(
        self,
        db: DatabaseManager,
        expense_dao: ExpenseDAO,
        income_dao: IncomeDAO,
        recurring_dao: RecurringDAO,
    ):
        self._db = db
        self._expense_dao = expense_dao
        self._income_dao = income_dao
        self._recurring_dao = recurring_dao

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._db.transaction():
            yield

    @contextmanager
    def owner_lock(self, owner_id: int) -> Iterator[None]:
        with self._db.owner_lock(owner_id):
            yield

    def find_due_recurring(self, owner_id: int, as_of: date) -> list[RecurringTransaction]:
        return self._recurring_dao.get_due(owner_id, as_of)

    def create_expense(
        self,
        owner_id: int,
        category: str,
        amount: Decimal,
        date: date,
        description: str = "",
        recurring_id: int | None = None,
    ) -> Expense:
        return self._expense_dao.create(
            owner_id=owner_id, category=category, amount=amount, date=date,
            description=description, recurring_id=recurring_id,
        )

    def create_income(
        self,
        owner_id: int,
        source: str,
        amount: Decimal,
        date: date,
        description: str = "",
        recurring_id: int | None = None,
    ) -> Income:
        return self._income_dao.create(
            owner_id=owner_id, source=source, amount=amount, date=date,
            description=description, recurring_id=recurring_id,
        )

    def update_recurring_schedule(
        self,
        recurring_id: int,
        last_processed: date,
        next_due: date,
        expected_next_due: date,
    ) -> RecurringTransaction:
        """Advance one schedule; raise ConcurrencyConflict if it moved underneath us."""
        updated = self._recurring_dao.update_schedule(
            recurring_id, last_processed, next_due, expected_next_due
        )
        if updated is None:
            raise ConcurrencyConflict(
                f"Recurring transaction {recurring_id} was advanced by another processor."
            )
        return updated
