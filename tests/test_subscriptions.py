"""Tests for subscription due-soon detection and payments."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from dhanmantri.services.errors import RecordNotFound
from dhanmantri.services.subscriptions import (
    add_subscription,
    is_due_soon,
    mark_paid,
    next_billing_date,
    notification_summary,
    split_due_soon,
)

TODAY = date(2025, 3, 20)


def test_next_billing_date_adds_thirty_days():
    assert next_billing_date(date(2025, 1, 31)) == date(2025, 3, 2)
    assert next_billing_date(date(2025, 2, 15)) == date(2025, 3, 17)


@pytest.mark.parametrize(
    "offset, expected",
    [(-1, False), (0, True), (3, True), (7, True), (8, False)],
)
def test_due_soon_window_is_inclusive(subscription_factory, offset, expected):
    sub = subscription_factory(billing_date=TODAY + timedelta(days=offset))
    assert is_due_soon(sub, today=TODAY) is expected


def test_split_due_soon_keeps_billing_order(subscription_factory, subscription_repo, user):
    subscription_factory(name="Later", billing_date=TODAY + timedelta(days=20))
    subscription_factory(name="Soon", billing_date=TODAY + timedelta(days=2))
    subscription_factory(name="Now", billing_date=TODAY)

    due, rest = split_due_soon(subscription_repo.list_all(user_id=user.id), today=TODAY)

    assert [s.name for s in due] == ["Now", "Soon"]
    assert [s.name for s in rest] == ["Later"]


def test_notification_summary_counts_and_totals(subscription_factory, subscription_repo, user):
    subscription_factory(name="Music", amount=119, billing_date=TODAY + timedelta(days=1))
    subscription_factory(name="Video", amount=649, billing_date=TODAY + timedelta(days=6))
    subscription_factory(name="Cloud", amount=75, billing_date=TODAY + timedelta(days=30))

    notice = notification_summary(subscription_repo.list_all(user_id=user.id), today=TODAY)

    assert notice.count == 2
    assert notice.total_amount == pytest.approx(768)
    assert notice.message == "You have 2 subscriptions due in the next week"


def test_notification_message_singular(subscription_factory, subscription_repo, user):
    subscription_factory(billing_date=TODAY)
    notice = notification_summary(subscription_repo.list_all(user_id=user.id), today=TODAY)
    assert notice.message == "You have 1 subscription due in the next week"


def test_add_subscription_requires_all_fields(subscription_repo, user):
    with pytest.raises(ValueError, match="Please fill in all required fields"):
        add_subscription(
            subscription_repo,
            name="  ",
            amount=10,
            billing_date=TODAY,
            category="Entertainment",
            user_id=user.id,
        )
    with pytest.raises(ValueError, match="greater than zero"):
        add_subscription(
            subscription_repo,
            name="Gym",
            amount=0,
            billing_date=TODAY,
            category="Health",
            user_id=user.id,
        )


def test_mark_paid_records_expense_and_advances_date(
    subscription_factory, subscription_repo, transaction_repo, user
):
    sub = subscription_factory(name="Netflix", amount=649, billing_date=TODAY + timedelta(days=2))

    payment, updated = mark_paid(
        sub.id,
        user_id=user.id,
        subscriptions=subscription_repo,
        transactions=transaction_repo,
        today=TODAY,
    )

    assert payment.type == "expense"
    assert payment.amount == 649
    assert payment.category == "Entertainment"
    assert payment.description == "Subscription payment for Netflix"
    assert payment.occurred_on == TODAY
    assert updated.billing_date == TODAY + timedelta(days=32)
    assert subscription_repo.get_by_id(sub.id, user_id=user.id).billing_date == updated.billing_date
    assert len(transaction_repo.list_all(user_id=user.id)) == 1


def test_mark_paid_rejects_other_users_subscription(
    subscription_factory, subscription_repo, transaction_repo, other_user
):
    sub = subscription_factory()

    with pytest.raises(RecordNotFound):
        mark_paid(
            sub.id,
            user_id=other_user.id,
            subscriptions=subscription_repo,
            transactions=transaction_repo,
            today=TODAY,
        )
    assert transaction_repo.list_all(user_id=other_user.id) == []
