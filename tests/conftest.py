from datetime import date
from decimal import Decimal

import pytest

from database.db_manager import DatabaseManager
from database.expense_dao import ExpenseDAO
from database.income_dao import IncomeDAO
from database.recurring_dao import RecurringDAO
from database.ledger_store import LedgerStore
from main import build_app
from services.recurring_service import RecurringService

OWNER = 1
OTHER_OWNER = 2


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("FINANCE_TRACKER_CONFIG", str(tmp_path / "config.json"))


@pytest.fixture
def db(tmp_path):
    manager = DatabaseManager.open(str(tmp_path / "finance.db"))
    yield manager
    manager.close()


@pytest.fixture
def app(db):
    return build_app(db)


@pytest.fixture
def expense_dao(db):
    return ExpenseDAO(db)


@pytest.fixture
def income_dao(db):
    return IncomeDAO(db)


@pytest.fixture
def recurring_dao(db):
    return RecurringDAO(db)


@pytest.fixture
def store(db, expense_dao, income_dao, recurring_dao):
    return LedgerStore(db, expense_dao, income_dao, recurring_dao)


@pytest.fixture
def recurring(recurring_dao, store):
    return RecurringService(recurring_dao, store)


@pytest.fixture
def make_recurring(recurring_dao):
    """Insert a template with an explicit next_due_date, bypassing the service."""
    def _make(**overrides):
        fields = dict(
            owner_id=OWNER,
            title="Rent",
            category="Housing",
            amount=Decimal("800"),
            frequency="monthly",
            start_date=date(2024, 1, 1),
            next_due_date=date(2024, 1, 1),
            is_expense=True,
            description=None,
            end_date=None,
        )
        fields.update(overrides)
        return recurring_dao.create(**fields)
    return _make
