from dataclasses import dataclass, field
from decimal import Decimal
from typing import Union

from models.expense import Expense
from models.income import Income


@dataclass(frozen=True)
class SavingsStatus:
    current_savings: Decimal
    is_reached: bool
    remaining: Decimal

    @property
    def status_text(self) -> str:
        return "Reached" if self.is_reached else "Not Reached"


@dataclass(frozen=True)
class FinancialReport:
    income: Decimal
    expenses_by_category: dict[str, Decimal]
    total_expenses: Decimal
    savings_status: SavingsStatus
    is_over_budget: bool
    suggestions: list[str] = field(default_factory=list)

    @property
    def net(self) -> Decimal:
        return self.income - self.total_expenses


@dataclass(frozen=True)
class MaterializedEntry:
    """A ledger entry created by the recurring processor for one due date."""
    kind: str               # 'expense' | 'income'
    record: Union[Expense, Income]
    recurring_id: int
