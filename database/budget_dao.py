from decimal import Decimal
from typing import Optional
from database.db_manager import DatabaseManager
from models.budget import Budget


class BudgetDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Budget:
        return Budget(
            id=row["id"],
            owner_id=row["owner_id"],
            category=row["category"],
            limit_amount=Decimal(row["limit_amount"]),
        )

    def get_by_owner(self, owner_id: int) -> list[Budget]:
        rows = self._db.fetch_all(
            "SELECT * FROM budgets WHERE owner_id = ? ORDER BY category",
            (owner_id,),
        )
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, owner_id: int, budget_id: int) -> Optional[Budget]:
        row = self._db.fetch_one(
            "SELECT * FROM budgets WHERE id = ? AND owner_id = ?",
            (budget_id, owner_id),
        )
        return self._row_to_model(row) if row else None

    def get_by_category(self, owner_id: int, category: str) -> Optional[Budget]:
        row = self._db.fetch_one(
            "SELECT * FROM budgets WHERE owner_id = ? AND category = ?",
            (owner_id, category),
        )
        return self._row_to_model(row) if row else None

    def upsert(self, owner_id: int, category: str, limit_amount: Decimal) -> Budget:
        with self._db.transaction() as conn:
            conn.execute(
                """INSERT INTO budgets(owner_id, category, limit_amount)
                   VALUES (?, ?, ?)
                   ON CONFLICT(owner_id, category)
                   DO UPDATE SET limit_amount = excluded.limit_amount""",
                (owner_id, category, str(limit_amount)),
            )
            return self.get_by_category(owner_id, category)

    def update_limit(self, owner_id: int, budget_id: int, limit_amount: Decimal) -> Optional[Budget]:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "UPDATE budgets SET limit_amount = ? WHERE id = ? AND owner_id = ?",
                (str(limit_amount), budget_id, owner_id),
            )
            if cursor.rowcount == 0:
                return None
            return self.get_by_id(owner_id, budget_id)

    def delete(self, owner_id: int, budget_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM budgets WHERE id = ? AND owner_id = ?",
                (budget_id, owner_id),
            )
            return cursor.rowcount > 0
