from datetime import date
from decimal import Decimal
from typing import Optional
from database.db_manager import DatabaseManager
from models.recurring_transaction import RecurringTransaction
from utils.date_helpers import parse_date, format_date


class RecurringDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> RecurringTransaction:
        return RecurringTransaction(
            id=row["id"],
            owner_id=row["owner_id"],
            title=row["title"],
            category=row["category"],
            amount=Decimal(row["amount"]),
            description=row["description"],
            frequency=row["frequency"],
            start_date=parse_date(row["start_date"]),
            end_date=parse_date(row["end_date"]) if row["end_date"] else None,
            last_processed_date=(
                parse_date(row["last_processed_date"]) if row["last_processed_date"] else None
            ),
            next_due_date=parse_date(row["next_due_date"]),
            is_expense=bool(row["is_expense"]),
            is_active=bool(row["is_active"]),
        )

    def get_by_owner(self, owner_id: int) -> list[RecurringTransaction]:
        rows = self._db.fetch_all(
            "SELECT * FROM recurring_transactions WHERE owner_id = ? ORDER BY next_due_date ASC, id ASC",
            (owner_id,),
        )
        return [self._row_to_model(r) for r in rows]

    def get_active(self, owner_id: int) -> list[RecurringTransaction]:
        rows = self._db.fetch_all(
            """SELECT * FROM recurring_transactions
               WHERE owner_id = ? AND is_active = 1
               ORDER BY next_due_date ASC, id ASC""",
            (owner_id,),
        )
        return [self._row_to_model(r) for r in rows]

    def get_due(self, owner_id: int, as_of: date) -> list[RecurringTransaction]:
        """Active rows whose next_due_date <= as_of and whose end_date has not passed as_of."""
        as_of_str = format_date(as_of)
        rows = self._db.fetch_all(
            """SELECT * FROM recurring_transactions
               WHERE owner_id = ?
                 AND is_active = 1
                 AND next_due_date <= ?
                 AND (end_date IS NULL OR end_date >= ?)
               ORDER BY next_due_date ASC, id ASC""",
            (owner_id, as_of_str, as_of_str),
        )
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, owner_id: int, recurring_id: int) -> Optional[RecurringTransaction]:
        row = self._db.fetch_one(
            "SELECT * FROM recurring_transactions WHERE id = ? AND owner_id = ?",
            (recurring_id, owner_id),
        )
        return self._row_to_model(row) if row else None

    def create(
        self,
        owner_id: int,
        title: str,
        category: str,
        amount: Decimal,
        frequency: str,
        start_date: date,
        next_due_date: date,
        is_expense: bool = True,
        description: str | None = None,
        end_date: date | None = None,
    ) -> RecurringTransaction:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """INSERT INTO recurring_transactions
                   (owner_id, title, category, amount, description, frequency,
                    start_date, end_date, next_due_date, is_expense)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    owner_id, title, category, str(amount), description, frequency,
                    format_date(start_date),
                    format_date(end_date) if end_date else None,
                    format_date(next_due_date),
                    1 if is_expense else 0,
                ),
            )
            return self.get_by_id(owner_id, cursor.lastrowid)

    def update(self, rt: RecurringTransaction) -> Optional[RecurringTransaction]:
        """Write every editable column of rt, including its (already recomputed) next_due_date."""
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """UPDATE recurring_transactions SET
                   title=?, category=?, amount=?, description=?, frequency=?,
                   start_date=?, end_date=?, next_due_date=?, is_expense=?,
                   is_active=?, updated_at=datetime('now')
                   WHERE id=? AND owner_id=?""",
                (
                    rt.title, rt.category, str(rt.amount), rt.description, rt.frequency,
                    format_date(rt.start_date),
                    format_date(rt.end_date) if rt.end_date else None,
                    format_date(rt.next_due_date),
                    1 if rt.is_expense else 0,
                    1 if rt.is_active else 0,
                    rt.id, rt.owner_id,
                ),
            )
            if cursor.rowcount == 0:
                return None
            return self.get_by_id(rt.owner_id, rt.id)

    def set_active(self, owner_id: int, recurring_id: int, is_active: bool) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """UPDATE recurring_transactions
                   SET is_active = ?, updated_at = datetime('now')
                   WHERE id = ? AND owner_id = ?""",
                (1 if is_active else 0, recurring_id, owner_id),
            )
            return cursor.rowcount > 0

    def update_schedule(
        self,
        recurring_id: int,
        last_processed: date,
        next_due: date,
        expected_next_due: date,
    ) -> Optional[RecurringTransaction]:
        """Advance the schedule only if next_due_date still equals expected_next_due.

        Returns None when another writer already moved the row.
        """
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """UPDATE recurring_transactions
                   SET last_processed_date = ?, next_due_date = ?, updated_at = datetime('now')
                   WHERE id = ? AND next_due_date = ?""",
                (
                    format_date(last_processed), format_date(next_due),
                    recurring_id, format_date(expected_next_due),
                ),
            )
            if cursor.rowcount != 1:
                return None
            row = conn.execute(
                "SELECT * FROM recurring_transactions WHERE id = ?", (recurring_id,)
            ).fetchone()
            return self._row_to_model(row)

    def delete(self, owner_id: int, recurring_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM recurring_transactions WHERE id = ? AND owner_id = ?",
                (recurring_id, owner_id),
            )
            return cursor.rowcount > 0
