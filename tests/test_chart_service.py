from decimal import Decimal

from services import aggregation
from services.chart_service import ChartService

PNG_MAGIC = b"\x89PNG"


def _report(expenses):
    return aggregation.report(Decimal("1000"), expenses, limit=500, goal=100)


def test_category_breakdown_writes_png(tmp_path, app):
    app.expenses.create(1, "Food", 120, "2024-03-01")
    app.expenses.create(1, "Rent", 600, "2024-03-02")
    report = app.reports.build_monthly_report(1, "2024-03")

    out = ChartService(dpi=50).render_category_breakdown(report, tmp_path / "charts" / "pie.png")

    assert out.exists()
    assert out.read_bytes().startswith(PNG_MAGIC)


def test_empty_breakdown_still_renders(tmp_path):
    out = ChartService(dpi=50).render_category_breakdown(_report([]), tmp_path / "empty.png")
    assert out.read_bytes().startswith(PNG_MAGIC)


def test_monthly_totals_chart(tmp_path):
    rows = [
        {"month": "2024-02", "income": Decimal("900"), "expense": Decimal("100")},
        {"month": "2024-03", "income": Decimal("1000"), "expense": Decimal("1750")},
    ]
    service = ChartService(dpi=50)

    bars = service.render_monthly_totals(rows, tmp_path / "bars.png")
    empty = service.render_monthly_totals([], tmp_path / "none.png")

    assert bars.read_bytes().startswith(PNG_MAGIC)
    assert empty.read_bytes().startswith(PNG_MAGIC)
