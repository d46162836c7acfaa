"""Transaction routes."""

from __future__ import annotations

from datetime import date

from flask import abort, flash, jsonify, redirect, render_template, request, url_for

from ...constants.categories import DEFAULT_CATEGORIES
from ...logging_config import get_logger
from ...models.transaction import Transaction
from ...services.ledger_service import (
    TransactionFilters,
    compute_summary,
    load_transactions,
    save_transaction,
    year_options,
)
from ..helpers import current_user_id, form_data, json_error, prefers_json, transaction_repo
from . import bp
from .forms import TransactionForm

logger = get_logger("blueprints.transactions")


def _serialize(tx: Transaction) -> dict:
    return {
        "id": tx.id,
        "amount": tx.amount,
        "type": tx.type,
        "category": tx.category,
        "date": tx.occurred_on.isoformat(),
        "description": tx.description,
    }


def _render_form(form: TransactionForm, *, transaction_id: int | None, status: int = 200):
    if transaction_id is None:
        action = url_for("transactions.create_transaction")
    else:
        action = url_for("transactions.update_transaction", transaction_id=transaction_id)
    return (
        render_template(
            "transactions/form.html",
            form=form,
            form_values=form.values(),
            form_action=action,
            categories=DEFAULT_CATEGORIES,
            is_edit=transaction_id is not None,
        ),
        status,
    )


@bp.get("/")
def list_transactions():
    """Every transaction of the user for the chosen period, newest first."""

    today = date.today()
    filters = TransactionFilters.from_args(request.args, today=today)
    transactions = load_transactions(
        transaction_repo(), filters, user_id=current_user_id(), today=today
    )
    summary = compute_summary(transactions)

    if prefers_json():
        return jsonify(
            {
                "filters": filters.as_query(),
                "summary": summary,
                "transactions": [_serialize(tx) for tx in transactions],
            }
        )

    return render_template(
        "transactions/index.html",
        transactions=transactions,
        summary=summary,
        filters=filters,
        years=year_options(today),
    )


@bp.get("/new")
def new_transaction():
    form = TransactionForm(type=request.args.get("type", "expense"))
    return _render_form(form, transaction_id=None)


def _persist(form: TransactionForm, *, transaction_id: int | None):
    try:
        saved = save_transaction(
            transaction_repo(),
            existing_id=transaction_id,
            amount=form.amount,
            txn_type=form.type,
            category=form.category,
            occurred_on=form.occurred_on,
            description=form.description,
            user_id=current_user_id(),
        )
    except ValueError as exc:
        if prefers_json():
            return json_error("validation_error", str(exc), 400)
        flash(str(exc), "danger")
        return _render_form(form, transaction_id=transaction_id, status=400)
    except Exception:
        logger.exception(
            "Failed to save transaction",
            extra={"user_id": current_user_id(), "transaction_id": transaction_id},
        )
        if prefers_json():
            return json_error("server_error", "Could not save the transaction.", 500)
        flash("Could not save the transaction. Please try again.", "danger")
        return redirect(url_for("transactions.list_transactions"))

    if saved is None:
        abort(404)

    logger.info(
        "Transaction saved",
        extra={"user_id": current_user_id(), "transaction_id": saved.id, "type": saved.type},
    )
    if prefers_json():
        return jsonify({"transaction": _serialize(saved)}), 200 if transaction_id else 201
    flash("Transaction updated" if transaction_id else "Transaction added", "success")
    return redirect(url_for("transactions.list_transactions"))


@bp.post("/")
def create_transaction():
    form = TransactionForm.from_mapping(form_data())
    if not form.validate():
        if prefers_json():
            return json_error("validation_error", form.first_error, 400)
        return _render_form(form, transaction_id=None, status=400)
    return _persist(form, transaction_id=None)


@bp.get("/<int:transaction_id>/edit")
def edit_transaction(transaction_id: int):
    transaction = transaction_repo().get_by_id(transaction_id, user_id=current_user_id())
    if transaction is None:
        abort(404)
    return _render_form(TransactionForm.from_transaction(transaction), transaction_id=transaction_id)


@bp.post("/<int:transaction_id>")
def update_transaction(transaction_id: int):
    form = TransactionForm.from_mapping(form_data())
    if not form.validate():
        if prefers_json():
            return json_error("validation_error", form.first_error, 400)
        return _render_form(form, transaction_id=transaction_id, status=400)
    return _persist(form, transaction_id=transaction_id)


@bp.post("/<int:transaction_id>/delete")
def delete_transaction(transaction_id: int):
    if not transaction_repo().delete(transaction_id, user_id=current_user_id()):
        abort(404)
    logger.info(
        "Transaction deleted",
        extra={"user_id": current_user_id(), "transaction_id": transaction_id},
    )
    if prefers_json():
        return jsonify({"deleted": transaction_id})
    flash("Transaction deleted", "success")
    return redirect(url_for("transactions.list_transactions"))
