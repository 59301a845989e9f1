from dataclasses import dataclass
from decimal import Decimal


@dataclass
class UserSettings:
    owner_id: int
    monthly_income: Decimal = Decimal("0")
    spending_limit: Decimal = Decimal("0")
    savings_goal: Decimal = Decimal("0")
