"""Transaction helpers for filtering, summaries, and persistence."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from ..domain.repositories import TransactionRepository
from ..models.transaction import TRANSACTION_TYPES, Transaction

FILTER_PERIODS = ("all", "week", "month")


@dataclass
class TransactionFilters:
    """Period filter applied to the dashboard and transaction list."""

    period: str = "all"  # all | week | month
    month: Optional[int] = None  # 1-12
    year: Optional[int] = None

    @classmethod
    def from_args(cls, args, *, today: date) -> "TransactionFilters":
        """Build filters from query-string arguments, falling back to today."""

        period = (args.get("period") or "all").strip().lower()
        if period not in FILTER_PERIODS:
            period = "all"
        month = _coerce_int(args.get("month"), default=today.month)
        if not 1 <= month <= 12:
            month = today.month
        year = _coerce_int(args.get("year"), default=today.year)
        return cls(period=period, month=month, year=year)

    def bounds(self, *, today: date) -> tuple[date, date] | None:
        """Return the inclusive date range, or ``None`` for ``all``."""

        if self.period == "week":
            return week_bounds(today)
        if self.period == "month":
            return month_bounds(self.year or today.year, self.month or today.month)
        return None

    def as_query(self) -> dict[str, str]:
        query = {"period": self.period}
        if self.period == "month":
            query["month"] = str(self.month)
            query["year"] = str(self.year)
        return query


def _coerce_int(raw, *, default: int) -> int:
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def week_bounds(today: date) -> tuple[date, date]:
    """Monday..Sunday of the week containing ``today``."""

    start = today - timedelta(days=today.weekday())
    return start, start + timedelta(days=6)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""

    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def year_options(today: date) -> list[int]:
    """Years offered by the month filter: two either side of today."""

    return [today.year - 2 + offset for offset in range(5)]


def load_transactions(
    repo: TransactionRepository, filters: TransactionFilters, *, user_id: int, today: date
) -> list[Transaction]:
    """Fetch the user's transactions inside the filter period, newest first."""

    bounds = filters.bounds(today=today)
    if bounds is None:
        return repo.list_all(user_id=user_id)
    start, end = bounds
    return repo.filter_by_date_range(start, end, user_id=user_id)


def compute_summary(transactions: Iterable[Transaction]) -> dict[str, float]:
    """Compute income, expenses, and balance totals from the provided transactions."""

    txs = list(transactions)
    income = sum(t.amount for t in txs if t.type == "income")
    expenses = sum(t.amount for t in txs if t.type == "expense")
    return {"income": income, "expenses": expenses, "balance": income - expenses}


def totals_by_category(
    transactions: Iterable[Transaction], *, txn_type: str | None = None
) -> dict[str, float]:
    """Sum amounts per category label, optionally for one transaction type.

    Insertion order follows the first time each category is seen.
    """

    totals: dict[str, float] = {}
    for tx in transactions:
        if txn_type is not None and tx.type != txn_type:
            continue
        totals[tx.category] = totals.get(tx.category, 0.0) + tx.amount
    return totals


def top_categories(totals: dict[str, float], limit: int = 3) -> list[tuple[str, float]]:
    """Return the ``limit`` largest category totals, biggest first."""

    return sorted(totals.items(), key=lambda item: item[1], reverse=True)[:limit]


def monthly_overview(transactions: Iterable[Transaction]) -> dict[str, dict[str, float]]:
    """Income/expense sums keyed by abbreviated month name, in first-seen order."""

    overview: dict[str, dict[str, float]] = {}
    for tx in transactions:
        label = tx.occurred_on.strftime("%b")
        bucket = overview.setdefault(label, {"income": 0.0, "expense": 0.0})
        if tx.type == "income":
            bucket["income"] += tx.amount
        else:
            bucket["expense"] += tx.amount
    return overview


def expense_total_between(transactions: Iterable[Transaction], start: date, end: date) -> float:
    return sum(
        t.amount for t in transactions if t.type == "expense" and start <= t.occurred_on <= end
    )


def save_transaction(
    repo: TransactionRepository,
    *,
    existing_id: int | None,
    amount: float,
    txn_type: str,
    category: str,
    occurred_on: date,
    description: str,
    user_id: int,
) -> Transaction | None:
    """Centralize transaction creation/update.

    Returns ``None`` when ``existing_id`` does not name a transaction owned by
    ``user_id``.
    """

    if txn_type not in TRANSACTION_TYPES:
        raise ValueError(f"Invalid transaction type: {txn_type}")
    if amount <= 0:
        raise ValueError("Amount must be greater than zero")
    if existing_id is not None:
        return repo.update(
            existing_id,
            {
                "amount": amount,
                "type": txn_type,
                "category": category,
                "occurred_on": occurred_on,
                "description": description,
            },
            user_id=user_id,
        )
    return repo.create(
        Transaction(
            amount=amount,
            type=txn_type,
            category=category,
            occurred_on=occurred_on,
            description=description,
            user_id=user_id,
        ),
        user_id=user_id,
    )
