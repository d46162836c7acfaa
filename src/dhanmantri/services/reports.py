"""Dashboard chart rendering."""

from __future__ import annotations

from io import BytesIO
from typing import Iterable

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from ..models.transaction import Transaction  # noqa: E402
from .ledger_service import monthly_overview, totals_by_category  # noqa: E402

INCOME_COLOR = "#10B981"
EXPENSE_COLOR = "#EF4444"


def build_category_chart(
    *,
    transactions: Iterable[Transaction],
    currency_symbol: str = "₹",
) -> Figure:
    """Donut chart of amounts per category label.

    Income and expense rows are both counted, so the chart shows where money
    moved rather than only spending.
    """

    totals = totals_by_category(transactions)
    sorted_items = sorted(totals.items(), key=lambda x: x[1], reverse=True)
    labels = [label for label, _ in sorted_items]
    sizes = [value for _, value in sorted_items]
    grand_total = sum(sizes)

    fig, ax = plt.subplots(figsize=(8, 6))

    if sizes:
        cmap = plt.get_cmap("tab20c")
        colors = [cmap(i / max(len(sizes), 1)) for i in range(len(sizes))]
        wedges, _, autotexts = ax.pie(
            sizes,
            labels=None,
            autopct=lambda pct: f"{pct:.1f}%" if pct > 4 else "",
            wedgeprops=dict(width=0.45, edgecolor="white", linewidth=1.5),
            startangle=90,
            colors=colors,
            pctdistance=0.78,
        )
        for autotext in autotexts:
            autotext.set_fontsize(9)
            autotext.set_color("white")

        ax.text(0, 0, f"{currency_symbol}{grand_total:,.0f}",
                ha="center", va="center", fontsize=16, fontweight="bold", color="#1F2937")
        ax.legend(
            wedges,
            [f"{label}: {currency_symbol}{value:,.2f}" for label, value in sorted_items],
            title="Categories",
            loc="center left",
            bbox_to_anchor=(1.02, 0.5),
            fontsize=9,
        )
        ax.axis("equal")
        ax.set_title("Category Distribution", fontsize=14, fontweight="bold")
    else:
        ax.text(0.5, 0.5, "No transactions", ha="center", va="center", fontsize=14, color="#666")
        ax.axis("off")

    fig.tight_layout()
    return fig


def build_monthly_chart(
    *,
    transactions: Iterable[Transaction],
    currency_symbol: str = "₹",
) -> Figure:
    """Side-by-side income and expense bars per month label."""

    overview = monthly_overview(transactions)
    labels = list(overview)
    income = [overview[label]["income"] for label in labels]
    expenses = [overview[label]["expense"] for label in labels]

    fig, ax = plt.subplots(figsize=(8, 5))
    if labels:
        positions = range(len(labels))
        width = 0.38
        ax.bar([p - width / 2 for p in positions], income, width, label="Income", color=INCOME_COLOR)
        ax.bar([p + width / 2 for p in positions], expenses, width, label="Expenses", color=EXPENSE_COLOR)
        ax.set_xticks(list(positions))
        ax.set_xticklabels(labels)
        ax.set_ylabel(f"Amount ({currency_symbol})")
        ax.legend()
        ax.grid(axis="y", alpha=0.3)
        ax.set_title("Monthly Overview", fontsize=14, fontweight="bold")
    else:
        ax.text(0.5, 0.5, "No transactions", ha="center", va="center", fontsize=14, color="#666")
        ax.axis("off")

    fig.tight_layout()
    return fig


def figure_to_png(fig: Figure) -> bytes:
    """Serialize and close a figure."""

    buffer = BytesIO()
    try:
        fig.savefig(buffer, format="png", bbox_inches="tight", dpi=110)
    finally:
        plt.close(fig)
    return buffer.getvalue()


def category_pie_png(transactions: Iterable[Transaction], *, currency_symbol: str = "₹") -> bytes:
    return figure_to_png(build_category_chart(transactions=transactions, currency_symbol=currency_symbol))


def monthly_bar_png(transactions: Iterable[Transaction], *, currency_symbol: str = "₹") -> bytes:
    return figure_to_png(build_monthly_chart(transactions=transactions, currency_symbol=currency_symbol))
