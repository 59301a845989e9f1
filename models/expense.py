from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass
class Expense:
    id: int
    owner_id: int
    category: str
    amount: Decimal
    date: date
    description: str = ""
    recurring_id: Optional[int] = None
    created_at: str = ""
