from datetime import date
from decimal import Decimal
from typing import Optional
from database.db_manager import DatabaseManager
from models.expense import Expense
from utils.date_helpers import parse_date, format_date


class ExpenseDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Expense:
        return Expense(
            id=row["id"],
            owner_id=row["owner_id"],
            category=row["category"],
            amount=Decimal(row["amount"]),
            date=parse_date(row["date"]),
            description=row["description"],
            recurring_id=row["recurring_id"],
            created_at=row["created_at"],
        )

    def get_by_owner(
        self,
        owner_id: int,
        start: date | None = None,
        end: date | None = None,
        category: str | None = None,
    ) -> list[Expense]:
        sql = "SELECT * FROM expenses WHERE owner_id = ?"
        params: list = [owner_id]
        if start:
            sql += " AND date >= ?"
            params.append(format_date(start))
        if end:
            sql += " AND date <= ?"
            params.append(format_date(end))
        if category:
            sql += " AND category = ?"
            params.append(category)
        sql += " ORDER BY date ASC, id ASC"
        return [self._row_to_model(r) for r in self._db.fetch_all(sql, params)]

    def get_by_id(self, owner_id: int, expense_id: int) -> Optional[Expense]:
        row = self._db.fetch_one(
            "SELECT * FROM expenses WHERE id = ? AND owner_id = ?",
            (expense_id, owner_id),
        )
        return self._row_to_model(row) if row else None

    def get_categories(self, owner_id: int) -> list[str]:
        rows = self._db.fetch_all(
            "SELECT DISTINCT category FROM expenses WHERE owner_id = ? ORDER BY category",
            (owner_id,),
        )
        return [r["category"] for r in rows]

    def create(
        self,
        owner_id: int,
        category: str,
        amount: Decimal,
        date: date,
        description: str = "",
        recurring_id: int | None = None,
    ) -> Expense:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """INSERT INTO expenses
                   (owner_id, category, amount, date, description, recurring_id)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (owner_id, category, str(amount), format_date(date), description, recurring_id),
            )
            return self.get_by_id(owner_id, cursor.lastrowid)

    def update(
        self,
        owner_id: int,
        expense_id: int,
        category: str,
        amount: Decimal,
        date: date,
        description: str = "",
    ) -> Optional[Expense]:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """UPDATE expenses
                   SET category=?, amount=?, date=?, description=?
                   WHERE id=? AND owner_id=?""",
                (category, str(amount), format_date(date), description, expense_id, owner_id),
            )
            if cursor.rowcount == 0:
                return None
            return self.get_by_id(owner_id, expense_id)

    def delete(self, owner_id: int, expense_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM expenses WHERE id = ? AND owner_id = ?",
                (expense_id, owner_id),
            )
            return cursor.rowcount > 0

    def delete_many(self, owner_id: int, expense_ids: list[int]) -> int:
        """Delete several expenses in one statement. Returns count deleted."""
        if not expense_ids:
            return 0
        placeholders = ",".join("?" * len(expense_ids))
        with self._db.transaction() as conn:
            cursor = conn.execute(
                f"DELETE FROM expenses WHERE owner_id = ? AND id IN ({placeholders})",
                [owner_id, *expense_ids],
            )
            return cursor.rowcount
