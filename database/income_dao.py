from datetime import date
from decimal import Decimal
from typing import Optional
from database.db_manager import DatabaseManager
from models.income import Income
from utils.date_helpers import parse_date, format_date


class IncomeDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Income:
        return Income(
            id=row["id"],
            owner_id=row["owner_id"],
            source=row["source"],
            amount=Decimal(row["amount"]),
            date=parse_date(row["date"]),
            description=row["description"],
            recurring_id=row["recurring_id"],
            created_at=row["created_at"],
        )

    def get_by_owner(
        self, owner_id: int, start: date | None = None, end: date | None = None
    ) -> list[Income]:
        sql = "SELECT * FROM incomes WHERE owner_id = ?"
        params: list = [owner_id]
        if start:
            sql += " AND date >= ?"
            params.append(format_date(start))
        if end:
            sql += " AND date <= ?"
            params.append(format_date(end))
        sql += " ORDER BY date DESC, id DESC"
        return [self._row_to_model(r) for r in self._db.fetch_all(sql, params)]

    def get_by_id(self, owner_id: int, income_id: int) -> Optional[Income]:
        row = self._db.fetch_one(
            "SELECT * FROM incomes WHERE id = ? AND owner_id = ?",
            (income_id, owner_id),
        )
        return self._row_to_model(row) if row else None

    def create(
        self,
        owner_id: int,
        source: str,
        amount: Decimal,
        date: date,
        description: str = "",
        recurring_id: int | None = None,
    ) -> Income:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """INSERT INTO incomes
                   (owner_id, source, amount, date, description, recurring_id)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (owner_id, source, str(amount), format_date(date), description, recurring_id),
            )
            return self.get_by_id(owner_id, cursor.lastrowid)

    def delete(self, owner_id: int, income_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM incomes WHERE id = ? AND owner_id = ?",
                (income_id, owner_id),
            )
            return cursor.rowcount > 0
