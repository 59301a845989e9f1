from models.user_settings import UserSettings
from database.settings_dao import SettingsDAO
from utils.currency import to_decimal
from utils.errors import InvalidArgument


class SettingsService:
    def __init__(self, settings_dao: SettingsDAO):
        self._dao = settings_dao

    def get(self, owner_id: int) -> UserSettings:
        return self._dao.get(owner_id)

    def update(
        self,
        owner_id: int,
        monthly_income=None,
        spending_limit=None,
        savings_goal=None,
    ) -> UserSettings:
        """Replace the given fields; omitted ones keep their stored value."""
        current = self._dao.get(owner_id)
        updated = UserSettings(
            owner_id=owner_id,
            monthly_income=self._amount(monthly_income, current.monthly_income, "Monthly income"),
            spending_limit=self._amount(spending_limit, current.spending_limit, "Spending limit"),
            savings_goal=self._amount(savings_goal, current.savings_goal, "Savings goal"),
        )
        return self._dao.save(updated)

    def _amount(self, value, fallback, field):
        if value is None:
            return fallback
        amount = to_decimal(value, field)
        if amount < 0:
            raise InvalidArgument(f"{field} cannot be negative.")
        return amount
