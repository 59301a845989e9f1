"""Render report charts to image files with matplotlib's Agg canvas."""
from pathlib import Path

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from models.report import FinancialReport
from utils.constants import CHART_COLORS

INCOME_COLOR = "#4CAF50"
EXPENSE_COLOR = "#F44336"


class ChartService:
    def __init__(self, dpi: int = 100):
        self._dpi = dpi

    def render_category_breakdown(self, report: FinancialReport, path) -> Path:
        """Pie chart of report.expenses_by_category."""
        fig = Figure(figsize=(5, 4), dpi=self._dpi, tight_layout=True)
        ax = fig.add_subplot(111)

        items = sorted(report.expenses_by_category.items(), key=lambda kv: -kv[1])
        total = sum(v for _, v in items)
        if not items or total == 0:
            ax.text(0.5, 0.5, "No expense data", ha="center", va="center",
                    transform=ax.transAxes, color="gray")
            ax.set_axis_off()
        else:
            ax.pie(
                [float(v) for _, v in items],
                labels=[c for c, _ in items],
                colors=[CHART_COLORS[i % len(CHART_COLORS)] for i in range(len(items))],
                autopct="%1.0f%%",
                startangle=90,
            )
            ax.set_aspect("equal")
        ax.set_title("Expense Breakdown")
        return self._save(fig, path)

    def render_monthly_totals(self, rows: list[dict], path) -> Path:
        """Grouped bar chart of income vs expense per month."""
        fig = Figure(figsize=(6, 3.5), dpi=self._dpi, tight_layout=True)
        ax = fig.add_subplot(111)

        if not rows:
            ax.text(0.5, 0.5, "No data", ha="center", va="center",
                    transform=ax.transAxes, color="gray")
            ax.set_axis_off()
            return self._save(fig, path)

        labels = [r["month"] for r in rows]
        incomes = [float(r.get("income", 0)) for r in rows]
        expenses = [float(r.get("expense", 0)) for r in rows]
        x = list(range(len(labels)))
        w = 0.35
        ax.bar([i - w / 2 for i in x], incomes, w, color=INCOME_COLOR, label="Income")
        ax.bar([i + w / 2 for i in x], expenses, w, color=EXPENSE_COLOR, label="Expenses")
        ax.set_xticks(x)
        ax.set_xticklabels(labels, rotation=45, ha="right")
        ax.yaxis.set_major_formatter(
            lambda v, _: f"{v/1000:.0f}k" if abs(v) >= 1000 else f"{v:.0f}"
        )
        ax.legend(loc="upper left", fontsize=8)
        ax.set_title("Monthly Income vs Expenses")
        return self._save(fig, path)

    def _save(self, fig: Figure, path) -> Path:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        FigureCanvasAgg(fig)
        fig.savefig(out)
        return out
