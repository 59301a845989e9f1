from datetime import date
from decimal import Decimal

from database.expense_dao import ExpenseDAO
from database.income_dao import IncomeDAO
from database.savings_goal_dao import SavingsGoalDAO
from database.settings_dao import SettingsDAO
from models.report import FinancialReport
from services import aggregation
from utils.date_helpers import add_months, current_month_str, format_month, month_bounds, today
from utils.errors import InvalidArgument


class ReportService:
    """Reads a fresh ledger snapshot per call and hands it to the aggregation engine."""

    def __init__(
        self,
        expense_dao: ExpenseDAO,
        income_dao: IncomeDAO,
        goal_dao: SavingsGoalDAO,
        settings_dao: SettingsDAO,
    ):
        self._expense_dao = expense_dao
        self._income_dao = income_dao
        self._goal_dao = goal_dao
        self._settings_dao = settings_dao

    def build_report(
        self,
        owner_id: int,
        start: date | None = None,
        end: date | None = None,
        limit=None,
        goal=None,
    ) -> FinancialReport:
        """Report over [start, end]. limit/goal default to the owner's stored settings."""
        settings = self._settings_dao.get(owner_id)
        expenses = self._expense_dao.get_by_owner(owner_id, start, end)
        incomes = self._income_dao.get_by_owner(owner_id, start, end)
        return aggregation.report(
            income=aggregation.total_income(incomes),
            expenses=expenses,
            limit=settings.spending_limit if limit is None else limit,
            goal=settings.savings_goal if goal is None else goal,
        )

    def build_monthly_report(self, owner_id: int, month: str | None = None, **kwargs) -> FinancialReport:
        start, end = month_bounds(month or current_month_str())
        return self.build_report(owner_id, start, end, **kwargs)

    def get_category_breakdown(self, owner_id: int, month: str | None = None) -> list[dict]:
        """Return [{category, total}, ...] sorted by total, largest first."""
        start, end = month_bounds(month or current_month_str())
        by_category = aggregation.expenses_by_category(
            self._expense_dao.get_by_owner(owner_id, start, end)
        )
        rows = [{"category": c, "total": t} for c, t in by_category.items()]
        rows.sort(key=lambda r: (-r["total"], r["category"]))
        return rows

    def get_monthly_totals(
        self, owner_id: int, months: int = 6, ref: date | None = None
    ) -> list[dict]:
        """Return [{month, income, expense, net}] for the last N months, oldest first."""
        if months < 1:
            raise InvalidArgument("months must be at least 1.")
        last_month = (ref or today()).replace(day=1)
        first_month = add_months(last_month, -(months - 1))
        _, end = month_bounds(format_month(last_month))
        expenses = self._expense_dao.get_by_owner(owner_id, first_month, end)
        incomes = self._income_dao.get_by_owner(owner_id, first_month, end)

        rows: dict[str, dict] = {}
        for i in range(months):
            key = format_month(add_months(first_month, i))
            rows[key] = {"month": key, "income": Decimal("0"), "expense": Decimal("0")}
        for inc in incomes:
            rows[format_month(inc.date)]["income"] += inc.amount
        for exp in expenses:
            rows[format_month(exp.date)]["expense"] += exp.amount
        for row in rows.values():
            row["net"] = row["income"] - row["expense"]
        return list(rows.values())

    def get_goal_progress(self, owner_id: int) -> list[dict]:
        """Return [{id, name, target, current, remaining, progress, reached}] per goal."""
        return [
            {
                "id": g.id,
                "name": g.name,
                "target": g.target_amount,
                "current": g.current_amount,
                "remaining": g.remaining,
                "progress": g.progress,
                "reached": g.is_reached,
            }
            for g in self._goal_dao.get_by_owner(owner_id)
        ]

    def export_csv(self, owner_id: int, month: str | None = None) -> list[list[str]]:
        """Return rows suitable for CSV export."""
        start, end = month_bounds(month or current_month_str())
        entries = [
            (e.date, e.id, "expense", e.category, e.description, e.amount)
            for e in self._expense_dao.get_by_owner(owner_id, start, end)
        ] + [
            (i.date, i.id, "income", i.source, i.description, i.amount)
            for i in self._income_dao.get_by_owner(owner_id, start, end)
        ]
        entries.sort(key=lambda row: (row[0], row[2], row[1]))

        rows = [["Date", "Type", "Category", "Description", "Amount"]]
        for d, _, kind, category, description, amount in entries:
            rows.append([d.isoformat(), kind, category, description, f"{amount:.2f}"])
        return rows
