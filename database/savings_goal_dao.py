from datetime import date
from decimal import Decimal
from typing import Optional
from database.db_manager import DatabaseManager
from models.savings_goal import SavingsGoal
from utils.date_helpers import parse_date, format_date


class SavingsGoalDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> SavingsGoal:
        return SavingsGoal(
            id=row["id"],
            owner_id=row["owner_id"],
            name=row["name"],
            target_amount=Decimal(row["target_amount"]),
            current_amount=Decimal(row["current_amount"]),
            target_date=parse_date(row["target_date"]) if row["target_date"] else None,
            created_at=row["created_at"],
        )

    def get_by_owner(self, owner_id: int) -> list[SavingsGoal]:
        rows = self._db.fetch_all(
            "SELECT * FROM savings_goals WHERE owner_id = ? ORDER BY created_at DESC, id DESC",
            (owner_id,),
        )
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, owner_id: int, goal_id: int) -> Optional[SavingsGoal]:
        row = self._db.fetch_one(
            "SELECT * FROM savings_goals WHERE id = ? AND owner_id = ?",
            (goal_id, owner_id),
        )
        return self._row_to_model(row) if row else None

    def create(
        self,
        owner_id: int,
        name: str,
        target_amount: Decimal,
        current_amount: Decimal,
        target_date: date | None = None,
    ) -> SavingsGoal:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """INSERT INTO savings_goals
                   (owner_id, name, target_amount, current_amount, target_date)
                   VALUES (?, ?, ?, ?, ?)""",
                (
                    owner_id, name, str(target_amount), str(current_amount),
                    format_date(target_date) if target_date else None,
                ),
            )
            return self.get_by_id(owner_id, cursor.lastrowid)

    def update(
        self,
        owner_id: int,
        goal_id: int,
        name: str,
        target_amount: Decimal,
        current_amount: Decimal,
        target_date: date | None = None,
    ) -> Optional[SavingsGoal]:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """UPDATE savings_goals
                   SET name=?, target_amount=?, current_amount=?, target_date=?
                   WHERE id=? AND owner_id=?""",
                (
                    name, str(target_amount), str(current_amount),
                    format_date(target_date) if target_date else None,
                    goal_id, owner_id,
                ),
            )
            if cursor.rowcount == 0:
                return None
            return self.get_by_id(owner_id, goal_id)

    def add_contribution(
        self, owner_id: int, goal_id: int, amount: Decimal
    ) -> Optional[SavingsGoal]:
        """Increment current_amount inside one write transaction.

        BEGIN IMMEDIATE takes the write lock before the read, so concurrent
        contributions serialize instead of overwriting each other. The sum is
        done in Decimal because amounts are stored as text.
        """
        with self._db.transaction() as conn:
            row = conn.execute(
                "SELECT current_amount FROM savings_goals WHERE id = ? AND owner_id = ?",
                (goal_id, owner_id),
            ).fetchone()
            if row is None:
                return None
            conn.execute(
                "UPDATE savings_goals SET current_amount = ? WHERE id = ? AND owner_id = ?",
                (str(Decimal(row["current_amount"]) + amount), goal_id, owner_id),
            )
            return self.get_by_id(owner_id, goal_id)

    def delete(self, owner_id: int, goal_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM savings_goals WHERE id = ? AND owner_id = ?",
                (goal_id, owner_id),
            )
            return cursor.rowcount > 0
