from datetime import date
from models.income import Income
from database.income_dao import IncomeDAO
from utils.currency import to_decimal
from utils.date_helpers import coerce_date, today
from utils.errors import InvalidArgument, NotFound


class IncomeService:
    def __init__(self, income_dao: IncomeDAO):
        self._dao = income_dao

    def get_for_owner(
        self, owner_id: int, start: date | None = None, end: date | None = None
    ) -> list[Income]:
        return self._dao.get_by_owner(owner_id, start, end)

    def create(
        self,
        owner_id: int,
        source: str,
        amount,
        date=None,
        description: str = "",
    ) -> Income:
        if not source or not source.strip():
            raise InvalidArgument("Income source cannot be empty.")
        amount = to_decimal(amount)
        if amount < 0:
            raise InvalidArgument("Income cannot be negative.")
        return self._dao.create(
            owner_id, source.strip(), amount, coerce_date(date or today()), description
        )

    def delete(self, owner_id: int, income_id: int):
        if not self._dao.delete(owner_id, income_id):
            raise NotFound("Income", income_id)
