from models.savings_goal import SavingsGoal
from database.savings_goal_dao import SavingsGoalDAO
from utils.currency import to_decimal
from utils.date_helpers import coerce_date
from utils.errors import InvalidArgument, NotFound


class SavingsService:
    def __init__(self, goal_dao: SavingsGoalDAO):
        self._dao = goal_dao

    def get_all(self, owner_id: int) -> list[SavingsGoal]:
        return self._dao.get_by_owner(owner_id)

    def get_by_id(self, owner_id: int, goal_id: int) -> SavingsGoal:
        goal = self._dao.get_by_id(owner_id, goal_id)
        if goal is None:
            raise NotFound("Savings goal", goal_id)
        return goal

    def create(
        self,
        owner_id: int,
        name: str,
        target_amount,
        current_amount=0,
        target_date=None,
    ) -> SavingsGoal:
        name, target, current, when = self._validate(
            name, target_amount, current_amount, target_date
        )
        return self._dao.create(owner_id, name, target, current, when)

    def update(
        self,
        owner_id: int,
        goal_id: int,
        name: str,
        target_amount,
        current_amount=0,
        target_date=None,
    ) -> SavingsGoal:
        name, target, current, when = self._validate(
            name, target_amount, current_amount, target_date
        )
        goal = self._dao.update(owner_id, goal_id, name, target, current, when)
        if goal is None:
            raise NotFound("Savings goal", goal_id)
        return goal

    def contribute(self, owner_id: int, goal_id: int, amount) -> SavingsGoal:
        """Add amount to the goal's current_amount."""
        amount = to_decimal(amount)
        if amount <= 0:
            raise InvalidArgument("Contribution must be positive.")
        goal = self._dao.add_contribution(owner_id, goal_id, amount)
        if goal is None:
            raise NotFound("Savings goal", goal_id)
        return goal

    def delete(self, owner_id: int, goal_id: int):
        if not self._dao.delete(owner_id, goal_id):
            raise NotFound("Savings goal", goal_id)

    def _validate(self, name, target_amount, current_amount, target_date):
        if not name or not name.strip():
            raise InvalidArgument("Goal name cannot be empty.")
        target = to_decimal(target_amount, "Target amount")
        current = to_decimal(current_amount, "Current amount")
        if target < 0 or current < 0:
            raise InvalidArgument("Savings amounts cannot be negative.")
        when = coerce_date(target_date, "target date") if target_date else None
        return name.strip(), target, current, when
