from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass
class RecurringTransaction:
    id: int
    owner_id: int
    title: str
    category: str
    amount: Decimal
    frequency: str          # see utils.constants.FREQUENCIES
    start_date: date
    next_due_date: date
    is_expense: bool = True
    is_active: bool = True
    description: Optional[str] = None
    end_date: Optional[date] = None
    last_processed_date: Optional[date] = None

    @property
    def kind(self) -> str:
        return "expense" if self.is_expense else "income"

    def is_expired(self, on: date) -> bool:
        return self.end_date is not None and on > self.end_date
