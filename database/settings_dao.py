from decimal import Decimal
from database.db_manager import DatabaseManager
from models.user_settings import UserSettings


class SettingsDAO:
    """Per-owner financial defaults (monthly income, spending limit, savings goal)."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def get(self, owner_id: int) -> UserSettings:
        """Return stored settings, or zeroed defaults when the owner has none yet."""
        row = self._db.fetch_one(
            "SELECT * FROM user_settings WHERE owner_id = ?", (owner_id,)
        )
        if row is None:
            return UserSettings(owner_id=owner_id)
        return UserSettings(
            owner_id=row["owner_id"],
            monthly_income=Decimal(row["monthly_income"]),
            spending_limit=Decimal(row["spending_limit"]),
            savings_goal=Decimal(row["savings_goal"]),
        )

    def save(self, settings: UserSettings) -> UserSettings:
        with self._db.transaction() as conn:
            conn.execute(
                """INSERT INTO user_settings(owner_id, monthly_income, spending_limit, savings_goal)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(owner_id) DO UPDATE SET
                       monthly_income = excluded.monthly_income,
                       spending_limit = excluded.spending_limit,
                       savings_goal   = excluded.savings_goal""",
                (
                    settings.owner_id,
                    str(settings.monthly_income),
                    str(settings.spending_limit),
                    str(settings.savings_goal),
                ),
            )
        return self.get(settings.owner_id)
