"""Dashboard routes."""

from __future__ import annotations

from datetime import date

from flask import jsonify, make_response, render_template, request

from ...services.ledger_service import (
    TransactionFilters,
    compute_summary,
    load_transactions,
    monthly_overview,
    totals_by_category,
    year_options,
)
from ...services.reports import category_pie_png, monthly_bar_png
from ...services.subscriptions import notification_summary
from ..helpers import (
    app_config,
    current_user_id,
    prefers_json,
    subscription_repo,
    transaction_repo,
)
from . import bp


def _filtered_transactions(today: date):
    filters = TransactionFilters.from_args(request.args, today=today)
    transactions = load_transactions(
        transaction_repo(), filters, user_id=current_user_id(), today=today
    )
    return filters, transactions


def _png(payload: bytes):
    response = make_response(payload)
    response.headers["Content-Type"] = "image/png"
    response.headers["Cache-Control"] = "no-store"
    return response


@bp.get("/")
def index():
    """Totals, breakdowns and charts for the filtered period."""

    today = date.today()
    filters, transactions = _filtered_transactions(today)
    summary = compute_summary(transactions)
    categories = totals_by_category(transactions)
    monthly = monthly_overview(transactions)
    notice = notification_summary(
        subscription_repo().list_all(user_id=current_user_id()), today=today
    )

    if prefers_json():
        return jsonify(
            {
                "filters": filters.as_query(),
                "summary": summary,
                "categories": categories,
                "monthly": monthly,
                "due_soon": {"count": notice.count, "total_amount": notice.total_amount},
            }
        )

    return render_template(
        "dashboard/index.html",
        filters=filters,
        years=year_options(today),
        summary=summary,
        categories=categories,
        monthly=monthly,
        notice=notice,
        recent=transactions[:5],
    )


@bp.get("/charts/categories.png")
def category_chart():
    _, transactions = _filtered_transactions(date.today())
    return _png(category_pie_png(transactions, currency_symbol=app_config().CURRENCY_SYMBOL))


@bp.get("/charts/monthly.png")
def monthly_chart():
    _, transactions = _filtered_transactions(date.today())
    return _png(monthly_bar_png(transactions, currency_symbol=app_config().CURRENCY_SYMBOL))
