from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass
class SavingsGoal:
    id: int
    owner_id: int
    name: str
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    target_date: Optional[date] = None
    created_at: str = ""

    @property
    def progress(self) -> float:
        """Fraction of the target saved so far, capped at 1.0."""
        if self.target_amount <= 0:
            return 1.0
        return min(1.0, float(self.current_amount / self.target_amount))

    @property
    def remaining(self) -> Decimal:
        return max(Decimal("0"), self.target_amount - self.current_amount)

    @property
    def is_reached(self) -> bool:
        return self.current_amount >= self.target_amount
