"""Subscription routes."""

from __future__ import annotations

from datetime import date

from flask import abort, flash, jsonify, redirect, render_template, url_for

from ...constants.categories import EXPENSE_CATEGORIES
from ...logging_config import get_logger
from ...models.subscription import Subscription
from ...services.errors import RecordNotFound
from ...services.subscriptions import add_subscription, mark_paid, notification_summary, split_due_soon
from ..helpers import (
    current_user_id,
    form_data,
    json_error,
    prefers_json,
    subscription_repo,
    transaction_repo,
)
from . import bp
from .forms import SubscriptionForm

logger = get_logger("blueprints.subscriptions")


def _serialize(sub: Subscription) -> dict:
    return {
        "id": sub.id,
        "name": sub.name,
        "amount": sub.amount,
        "billing_date": sub.billing_date.isoformat(),
        "category": sub.category,
    }


@bp.get("/")
def list_subscriptions():
    """Due-soon subscriptions first, then everything else by billing date."""

    today = date.today()
    subscriptions = subscription_repo().list_all(user_id=current_user_id())
    due, upcoming = split_due_soon(subscriptions, today=today)
    notice = notification_summary(subscriptions, today=today)

    if prefers_json():
        return jsonify(
            {
                "due_soon": [_serialize(s) for s in due],
                "upcoming": [_serialize(s) for s in upcoming],
                "due_total": notice.total_amount,
            }
        )

    return render_template(
        "subscriptions/index.html",
        due=due,
        upcoming=upcoming,
        notice=notice,
        form=SubscriptionForm(),
        form_values={"billing_date": today.isoformat()},
        categories=EXPENSE_CATEGORIES,
    )


@bp.post("/")
def create_subscription():
    form = SubscriptionForm.from_mapping(form_data())
    if not form.validate():
        if prefers_json():
            return json_error("validation_error", form.first_error, 400)
        flash(form.first_error, "danger")
        return redirect(url_for("subscriptions.list_subscriptions"))

    try:
        subscription = add_subscription(
            subscription_repo(),
            name=form.name,
            amount=form.amount,
            billing_date=form.billing_date,
            category=form.category,
            user_id=current_user_id(),
        )
    except ValueError as exc:
        if prefers_json():
            return json_error("validation_error", str(exc), 400)
        flash(str(exc), "danger")
        return redirect(url_for("subscriptions.list_subscriptions"))
    except Exception:
        logger.exception("Failed to add subscription", extra={"user_id": current_user_id()})
        if prefers_json():
            return json_error("server_error", "Could not add the subscription.", 500)
        flash("Could not add the subscription. Please try again.", "danger")
        return redirect(url_for("subscriptions.list_subscriptions"))

    if prefers_json():
        return jsonify({"subscription": _serialize(subscription)}), 201
    flash(f"Subscription {subscription.name} added", "success")
    return redirect(url_for("subscriptions.list_subscriptions"))


@bp.post("/<int:subscription_id>/pay")
def pay_subscription(subscription_id: int):
    """Record this cycle's payment and push the billing date forward."""

    try:
        payment, updated = mark_paid(
            subscription_id,
            user_id=current_user_id(),
            subscriptions=subscription_repo(),
            transactions=transaction_repo(),
            today=date.today(),
        )
    except RecordNotFound:
        abort(404)
    except Exception:
        logger.exception(
            "Failed to mark subscription paid",
            extra={"user_id": current_user_id(), "subscription_id": subscription_id},
        )
        if prefers_json():
            return json_error("server_error", "Could not record the payment.", 500)
        flash("Could not record the payment. Please try again.", "danger")
        return redirect(url_for("subscriptions.list_subscriptions"))

    if prefers_json():
        return jsonify(
            {
                "subscription": _serialize(updated),
                "payment": {
                    "id": payment.id,
                    "amount": payment.amount,
                    "date": payment.occurred_on.isoformat(),
                    "description": payment.description,
                },
            }
        )
    flash(
        f"Payment recorded. Next billing date: {updated.billing_date.strftime('%b %d, %Y')}",
        "success",
    )
    return redirect(url_for("subscriptions.list_subscriptions"))


@bp.post("/<int:subscription_id>/delete")
def delete_subscription(subscription_id: int):
    if not subscription_repo().delete(subscription_id, user_id=current_user_id()):
        abort(404)
    logger.info(
        "Subscription deleted",
        extra={"user_id": current_user_id(), "subscription_id": subscription_id},
    )
    if prefers_json():
        return jsonify({"deleted": subscription_id})
    flash("Subscription deleted", "success")
    return redirect(url_for("subscriptions.list_subscriptions"))
