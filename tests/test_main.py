import csv
from datetime import date

import pytest

from database.db_manager import DatabaseManager
from main import build_app, main
from services.recurring_service import RecurringService
from utils.errors import ConcurrencyConflict


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "cli.db"
    db = DatabaseManager.open(str(path))
    app = build_app(db)
    app.recurring.create(1, "Rent", "Housing", 800, "monthly", "2023-12-01")
    app.incomes.create(1, "Salary", 2000, "2024-03-01")
    db.close()
    return str(path)


def run(db_path, *args):
    return main(["--db", db_path, "--log-level", "WARNING", *args])


def test_process_due_command(db_path, capsys):
    assert run(db_path, "process-due", "--owner", "1", "--as-of", "2024-04-15") == 0
    out = capsys.readouterr().out
    assert "Processed 4 recurring transactions" in out
    assert "2024-01-01" in out and "2024-04-01" in out

    assert run(db_path, "process-due", "--owner", "1", "--as-of", "2024-04-15") == 0
    assert "Processed 0 recurring transactions" in capsys.readouterr().out


def test_invalid_as_of_is_a_usage_error(db_path, capsys):
    assert run(db_path, "process-due", "--owner", "1", "--as-of", "15/04/2024") == 2
    assert capsys.readouterr().err.startswith("error: Invalid as-of date")


def test_report_command_writes_chart_and_csv(db_path, tmp_path, capsys):
    run(db_path, "process-due", "--owner", "1", "--as-of", "2024-03-31")
    capsys.readouterr()
    chart = tmp_path / "out" / "pie.png"
    export = tmp_path / "march.csv"

    code = run(
        db_path, "report", "--owner", "1", "--month", "2024-03",
        "--limit", "700", "--goal", "1500", "--chart", str(chart), "--csv", str(export),
    )

    assert code == 0
    out = capsys.readouterr().out
    assert "Report for March 2024" in out
    assert "Net:       +$1,200.00" in out
    assert "Over budget: yes" in out
    assert "You are $300.00 away from your savings goal." in out
    assert chart.exists()
    with open(export, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Date", "Type", "Category", "Description", "Amount"]
    assert ["2024-03-01", "expense", "Housing", "Rent (Recurring)", "800.00"] in rows


def test_report_rejects_negative_limit(db_path, capsys):
    assert run(db_path, "report", "--owner", "1", "--month", "2024-03", "--limit", "-5") == 2
    assert "Spending limit cannot be negative." in capsys.readouterr().err


def test_upcoming_command(db_path, capsys, monkeypatch):
    monkeypatch.setattr("services.recurring_service.today", lambda: date(2023, 12, 20))
    assert run(db_path, "upcoming", "--owner", "1", "--days", "15") == 0
    out = capsys.readouterr().out
    assert "2024-01-01" in out
    assert "Rent" in out


def test_unopenable_database_is_a_runtime_error(tmp_path, capsys):
    missing = tmp_path / "missing" / "dir" / "x.db"
    assert main(["--db", str(missing), "--log-level", "WARNING", "upcoming", "--owner", "1"]) == 1
    assert "Traceback" not in capsys.readouterr().err


def test_processing_conflict_is_a_runtime_error(db_path, capsys, monkeypatch):
    def conflict(self, owner_id, as_of=None):
        raise ConcurrencyConflict("schedule advanced by another processor")

    monkeypatch.setattr(RecurringService, "process_due", conflict)

    assert run(db_path, "process-due", "--owner", "1", "--as-of", "2024-04-15") == 1
    captured = capsys.readouterr()
    assert "Processed" not in captured.out
    assert "Traceback" not in captured.err
