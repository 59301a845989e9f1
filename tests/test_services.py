import threading
from datetime import date
from decimal import Decimal

import pytest

from conftest import OTHER_OWNER, OWNER
from utils.errors import InvalidArgument, NotFound


# ── Expenses ─────────────────────────────────────────────────────────────────

def test_expense_crud(app):
    exp = app.expenses.create(OWNER, " Food ", "12.50", "2024-03-02", "Lunch")
    assert exp.category == "Food"
    assert exp.amount == Decimal("12.50")
    assert exp.date == date(2024, 3, 2)

    updated = app.expenses.update(OWNER, exp.id, "Dining", "14", description="Lunch+tip")
    assert updated.category == "Dining"
    assert updated.amount == Decimal("14")
    assert updated.date == date(2024, 3, 2)

    app.expenses.delete(OWNER, exp.id)
    with pytest.raises(NotFound):
        app.expenses.get_by_id(OWNER, exp.id)


def test_expense_validation(app):
    with pytest.raises(InvalidArgument):
        app.expenses.create(OWNER, "", 10)
    with pytest.raises(InvalidArgument):
        app.expenses.create(OWNER, "Food", -1)
    with pytest.raises(InvalidArgument):
        app.expenses.create(OWNER, "Food", "ten")
    with pytest.raises(InvalidArgument):
        app.expenses.create(OWNER, "Food", 10, "yesterday")


def test_expense_filters_and_categories(app):
    app.expenses.create(OWNER, "Food", 10, "2024-03-01")
    app.expenses.create(OWNER, "Transport", 5, "2024-03-15")
    app.expenses.create(OWNER, "Food", 7, "2024-04-01")

    march = app.expenses.get_for_owner(OWNER, date(2024, 3, 1), date(2024, 3, 31))
    assert [e.amount for e in march] == [Decimal("10"), Decimal("5")]
    food = app.expenses.get_for_owner(OWNER, category="Food")
    assert len(food) == 2
    assert app.expenses.get_categories(OWNER) == ["Food", "Transport"]


def test_bulk_delete_only_touches_own_rows(app):
    mine = [app.expenses.create(OWNER, "Food", n, "2024-03-01") for n in (1, 2, 3)]
    theirs = app.expenses.create(OTHER_OWNER, "Food", 9, "2024-03-01")

    deleted = app.expenses.bulk_delete(OWNER, [mine[0].id, mine[1].id, theirs.id])

    assert deleted == 2
    assert [e.id for e in app.expenses.get_for_owner(OWNER)] == [mine[2].id]
    assert app.expenses.get_by_id(OTHER_OWNER, theirs.id).amount == Decimal("9")
    with pytest.raises(InvalidArgument):
        app.expenses.bulk_delete(OWNER, [])


def test_owners_do_not_see_each_other(app):
    exp = app.expenses.create(OWNER, "Food", 10, "2024-03-01")
    assert app.expenses.get_for_owner(OTHER_OWNER) == []
    with pytest.raises(NotFound):
        app.expenses.get_by_id(OTHER_OWNER, exp.id)
    with pytest.raises(NotFound):
        app.expenses.delete(OTHER_OWNER, exp.id)


# ── Incomes ──────────────────────────────────────────────────────────────────

def test_income_create_and_delete(app):
    inc = app.incomes.create(OWNER, "Salary", "3000", "2024-03-01")
    assert inc.source == "Salary"
    assert app.incomes.get_for_owner(OWNER) == [inc]

    app.incomes.delete(OWNER, inc.id)
    assert app.incomes.get_for_owner(OWNER) == []
    with pytest.raises(NotFound):
        app.incomes.delete(OWNER, inc.id)
    with pytest.raises(InvalidArgument):
        app.incomes.create(OWNER, "Salary", -5)


# ── Budgets ──────────────────────────────────────────────────────────────────

def test_budget_upsert_keeps_one_per_category(app):
    first = app.budgets.upsert(OWNER, "Food", 200)
    second = app.budgets.upsert(OWNER, "Food", 250)

    assert first.id == second.id
    (budget,) = app.budgets.get_all(OWNER)
    assert budget.limit_amount == Decimal("250")


def test_budget_status_for_month(app):
    app.budgets.upsert(OWNER, "Food", 100)
    app.budgets.upsert(OWNER, "Fun", 50)
    app.expenses.create(OWNER, "Food", 80, "2024-03-05")
    app.expenses.create(OWNER, "Food", 30, "2024-03-20")
    app.expenses.create(OWNER, "Food", 999, "2024-04-01")

    status = {b.category: b for b in app.budgets.get_budget_status(OWNER, "2024-03")}

    assert status["Food"].spent_amount == Decimal("110")
    assert status["Food"].is_over
    assert status["Food"].is_near_limit
    assert status["Fun"].spent_amount == Decimal("0")
    assert status["Fun"].remaining == Decimal("50")
    assert not status["Fun"].is_near_limit


def test_budget_limits_are_validated(app):
    with pytest.raises(InvalidArgument):
        app.budgets.upsert(OWNER, "Food", -1)
    budget = app.budgets.upsert(OWNER, "Food", 10)
    with pytest.raises(InvalidArgument):
        app.budgets.update_limit(OWNER, budget.id, -1)
    with pytest.raises(NotFound):
        app.budgets.update_limit(OWNER, 999, 5)
    assert app.budgets.update_limit(OWNER, budget.id, 0).limit_amount == Decimal("0")


# ── Savings goals ────────────────────────────────────────────────────────────

def test_savings_goal_contribution(app):
    goal = app.savings.create(OWNER, "Holiday", 1000, 250, "2024-12-01")
    assert goal.progress == 0.25

    goal = app.savings.contribute(OWNER, goal.id, "750")

    assert goal.current_amount == Decimal("1000")
    assert goal.is_reached
    assert goal.remaining == Decimal("0")
    assert goal.target_date == date(2024, 12, 1)
    with pytest.raises(InvalidArgument):
        app.savings.contribute(OWNER, goal.id, 0)


def test_concurrent_contributions_are_not_lost(app):
    goal = app.savings.create(OWNER, "Emergency fund", 1000)
    barrier = threading.Barrier(4)

    def worker():
        barrier.wait()
        for _ in range(5):
            app.savings.contribute(OWNER, goal.id, "2.50")

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert app.savings.get_by_id(OWNER, goal.id).current_amount == Decimal("50.00")
    with pytest.raises(NotFound):
        app.savings.contribute(OWNER, 999, 1)


def test_savings_goal_validation(app):
    with pytest.raises(InvalidArgument):
        app.savings.create(OWNER, "", 10)
    with pytest.raises(InvalidArgument):
        app.savings.create(OWNER, "Car", -10)
    with pytest.raises(NotFound):
        app.savings.delete(OWNER, 42)


# ── Settings ─────────────────────────────────────────────────────────────────

def test_settings_default_to_zero(app):
    settings = app.settings.get(OWNER)
    assert settings.spending_limit == Decimal("0")
    assert settings.savings_goal == Decimal("0")


def test_settings_partial_update(app):
    app.settings.update(OWNER, monthly_income=3000, spending_limit=2000, savings_goal=500)
    settings = app.settings.update(OWNER, savings_goal="750")

    assert settings.monthly_income == Decimal("3000")
    assert settings.spending_limit == Decimal("2000")
    assert settings.savings_goal == Decimal("750")
    assert app.settings.get(OWNER) == settings
    with pytest.raises(InvalidArgument):
        app.settings.update(OWNER, spending_limit=-1)


# ── Reports ──────────────────────────────────────────────────────────────────

@pytest.fixture
def march_ledger(app):
    app.incomes.create(OWNER, "Salary", 1000, "2024-03-01")
    app.expenses.create(OWNER, "Food", 300, "2024-03-03")
    app.expenses.create(OWNER, "Rent", 450, "2024-03-05")
    app.expenses.create(OWNER, "Food", 100, "2024-02-10")
    app.incomes.create(OWNER, "Salary", 900, "2024-02-01")
    return app


def test_monthly_report_uses_stored_settings(march_ledger):
    app = march_ledger
    app.settings.update(OWNER, spending_limit=700, savings_goal=400)

    report = app.reports.build_monthly_report(OWNER, "2024-03")

    assert report.income == Decimal("1000")
    assert report.total_expenses == Decimal("750")
    assert report.expenses_by_category == {"Food": Decimal("300"), "Rent": Decimal("450")}
    assert report.is_over_budget
    assert report.savings_status.current_savings == Decimal("250")
    assert report.savings_status.remaining == Decimal("150")
    assert report.suggestions == [
        "Consider reducing spending on non-essential items.",
        "You are $150.00 away from your savings goal. "
        "Keep track of your spending to reach your goal!",
    ]


def test_report_arguments_override_settings(march_ledger):
    app = march_ledger
    app.settings.update(OWNER, spending_limit=1, savings_goal=99999)

    report = app.reports.build_monthly_report(OWNER, "2024-03", limit="800", goal="200")

    assert not report.is_over_budget
    assert report.savings_status.is_reached
    with pytest.raises(InvalidArgument):
        app.reports.build_monthly_report(OWNER, "2024-03", limit=-1)


def test_report_is_isolated_per_owner(march_ledger):
    report = march_ledger.reports.build_monthly_report(OTHER_OWNER, "2024-03")
    assert report.income == Decimal("0")
    assert report.total_expenses == Decimal("0")
    assert report.expenses_by_category == {}
    assert report.savings_status.is_reached


def test_category_breakdown_sorted_by_total(march_ledger):
    rows = march_ledger.reports.get_category_breakdown(OWNER, "2024-03")
    assert rows == [
        {"category": "Rent", "total": Decimal("450")},
        {"category": "Food", "total": Decimal("300")},
    ]


def test_monthly_totals(march_ledger):
    rows = march_ledger.reports.get_monthly_totals(OWNER, months=3, ref=date(2024, 3, 20))

    assert [r["month"] for r in rows] == ["2024-01", "2024-02", "2024-03"]
    assert rows[0]["net"] == Decimal("0")
    assert rows[1]["income"] == Decimal("900")
    assert rows[1]["expense"] == Decimal("100")
    assert rows[2]["net"] == Decimal("250")
    with pytest.raises(InvalidArgument):
        march_ledger.reports.get_monthly_totals(OWNER, months=0)


def test_goal_progress(app):
    app.savings.create(OWNER, "Bike", 400, 100)
    (row,) = app.reports.get_goal_progress(OWNER)
    assert row["name"] == "Bike"
    assert row["remaining"] == Decimal("300")
    assert row["progress"] == 0.25
    assert not row["reached"]


def test_export_csv_rows(march_ledger):
    rows = march_ledger.reports.export_csv(OWNER, "2024-03")
    assert rows == [
        ["Date", "Type", "Category", "Description", "Amount"],
        ["2024-03-01", "income", "Salary", "", "1000.00"],
        ["2024-03-03", "expense", "Food", "", "300.00"],
        ["2024-03-05", "expense", "Rent", "", "450.00"],
    ]
