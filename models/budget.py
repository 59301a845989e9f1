from dataclasses import dataclass
from decimal import Decimal

from utils.constants import BUDGET_ALERT_THRESHOLD


@dataclass
class Budget:
    id: int
    owner_id: int
    category: str
    limit_amount: Decimal
    spent_amount: Decimal = Decimal("0")

    @property
    def percentage(self) -> float:
        if self.limit_amount <= 0:
            return 0.0
        return float(self.spent_amount / self.limit_amount)

    @property
    def remaining(self) -> Decimal:
        return max(Decimal("0"), self.limit_amount - self.spent_amount)

    @property
    def is_over(self) -> bool:
        return self.spent_amount > self.limit_amount

    @property
    def is_near_limit(self) -> bool:
        return self.percentage >= BUDGET_ALERT_THRESHOLD
