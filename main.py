import argparse
import csv
import logging
import os
import sys
from dataclasses import dataclass

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager
from database.expense_dao import ExpenseDAO
from database.income_dao import IncomeDAO
from database.budget_dao import BudgetDAO
from database.savings_goal_dao import SavingsGoalDAO
from database.recurring_dao import RecurringDAO
from database.settings_dao import SettingsDAO
from database.ledger_store import LedgerStore

from services.expense_service import ExpenseService
from services.income_service import IncomeService
from services.budget_service import BudgetService
from services.savings_service import SavingsService
from services.settings_service import SettingsService
from services.recurring_service import RecurringService
from services.report_service import ReportService
from services.chart_service import ChartService

from utils.app_config import get_db_path, get_log_level
from utils.constants import APP_NAME, UPCOMING_DAYS
from utils.currency import format_currency, format_signed
from utils.date_helpers import coerce_date, current_month_str, friendly_month
from utils.errors import FinanceError, InvalidArgument, NotFound

logger = logging.getLogger("finance_tracker")


@dataclass
class App:
    db: DatabaseManager
    expenses: ExpenseService
    incomes: IncomeService
    budgets: BudgetService
    savings: SavingsService
    settings: SettingsService
    recurring: RecurringService
    reports: ReportService
    charts: ChartService


def build_app(db: DatabaseManager) -> App:
    # ── DAOs ─────────────────────────────────────────────────────────────────
    expense_dao = ExpenseDAO(db)
    income_dao = IncomeDAO(db)
    budget_dao = BudgetDAO(db)
    goal_dao = SavingsGoalDAO(db)
    recurring_dao = RecurringDAO(db)
    settings_dao = SettingsDAO(db)
    store = LedgerStore(db, expense_dao, income_dao, recurring_dao)

    # ── Services ─────────────────────────────────────────────────────────────
    return App(
        db=db,
        expenses=ExpenseService(expense_dao),
        incomes=IncomeService(income_dao),
        budgets=BudgetService(budget_dao, expense_dao),
        savings=SavingsService(goal_dao),
        settings=SettingsService(settings_dao),
        recurring=RecurringService(recurring_dao, store),
        reports=ReportService(expense_dao, income_dao, goal_dao, settings_dao),
        charts=ChartService(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="finance-tracker", description=APP_NAME)
    parser.add_argument("--db", help="SQLite database path (default: from config)")
    parser.add_argument("--log-level", help="Logging level (default: from config)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("process-due", help="Materialize due recurring transactions")
    p.add_argument("--owner", type=int, required=True)
    p.add_argument("--as-of", help="Process up to this date, YYYY-MM-DD (default: today)")

    p = sub.add_parser("report", help="Print the financial report for a month")
    p.add_argument("--owner", type=int, required=True)
    p.add_argument("--month", help="YYYY-MM (default: current month)")
    p.add_argument("--limit", help="Spending limit (default: owner setting)")
    p.add_argument("--goal", help="Savings goal (default: owner setting)")
    p.add_argument("--chart", help="Write an expense breakdown PNG to this path")
    p.add_argument("--csv", help="Write the month's ledger entries to this CSV path")

    p = sub.add_parser("upcoming", help="List upcoming recurring due dates")
    p.add_argument("--owner", type=int, required=True)
    p.add_argument("--days", type=int, default=UPCOMING_DAYS)
    return parser


def cmd_process_due(app: App, args) -> None:
    as_of = coerce_date(args.as_of, "as-of date") if args.as_of else None
    entries = app.recurring.process_due(args.owner, as_of)
    print(f"Processed {len(entries)} recurring transactions")
    for entry in entries:
        label = getattr(entry.record, "category", None) or getattr(entry.record, "source", "")
        print(f"  {entry.record.date}  {entry.kind:<7}  {label:<20}  {format_currency(entry.record.amount)}")


def cmd_report(app: App, args) -> None:
    month = args.month or current_month_str()
    report = app.reports.build_monthly_report(
        args.owner, month, limit=args.limit, goal=args.goal
    )
    print(f"Report for {friendly_month(month)}")
    print(f"  Income:    {format_currency(report.income)}")
    print(f"  Expenses:  {format_currency(report.total_expenses)}")
    print(f"  Net:       {format_signed(report.net)}")
    for category, total in sorted(report.expenses_by_category.items()):
        print(f"    {category:<20} {format_currency(total)}")
    status = report.savings_status
    print(f"  Savings:   {format_currency(status.current_savings)} ({status.status_text})")
    print(f"  Over budget: {'yes' if report.is_over_budget else 'no'}")
    for suggestion in report.suggestions:
        print(f"  * {suggestion}")

    if args.chart:
        path = app.charts.render_category_breakdown(report, args.chart)
        print(f"Chart written to {path}")
    if args.csv:
        with open(args.csv, "w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerows(app.reports.export_csv(args.owner, month))
        print(f"CSV written to {args.csv}")


def cmd_upcoming(app: App, args) -> None:
    items = app.recurring.upcoming(args.owner, days=args.days)
    if not items:
        print(f"Nothing due in the next {args.days} days")
    for item in items:
        print(f"  {item['date']}  {item['kind']:<7}  {item['title']:<20}  {format_currency(item['amount'])}")


COMMANDS = {
    "process-due": cmd_process_due,
    "report": cmd_report,
    "upcoming": cmd_upcoming,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or get_log_level()).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # ── Database ─────────────────────────────────────────────────────────────
    db = None
    try:
        db = DatabaseManager.open(args.db or get_db_path())
        COMMANDS[args.command](build_app(db), args)
    except (InvalidArgument, NotFound) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except FinanceError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    finally:
        if db is not None:
            db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
