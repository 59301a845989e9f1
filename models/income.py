from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass
class Income:
    id: int
    owner_id: int
    source: str
    amount: Decimal
    date: date
    description: str = ""
    recurring_id: Optional[int] = None
    created_at: str = ""
