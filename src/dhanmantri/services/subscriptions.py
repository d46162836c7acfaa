"""Recurring subscription helpers: due-soon detection and payment."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from ..config import BaseConfig
from ..domain.repositories import SubscriptionRepository, TransactionRepository
from ..logging_config import get_logger
from ..models.subscription import Subscription
from ..models.transaction import Transaction
from .errors import RecordNotFound

logger = get_logger("subscriptions")


@dataclass(frozen=True)
class DueNotice:
    """Subscriptions billing within the next week."""

    subscriptions: list[Subscription]
    total_amount: float

    @property
    def count(self) -> int:
        return len(self.subscriptions)

    @property
    def message(self) -> str:
        plural = "" if self.count == 1 else "s"
        return f"You have {self.count} subscription{plural} due in the next week"


def next_billing_date(current: date, *, cycle_days: int = BaseConfig.SUBSCRIPTION_CYCLE_DAYS) -> date:
    """Advance a billing date by one fixed-length cycle."""

    return current + timedelta(days=cycle_days)


def is_due_soon(
    subscription: Subscription, *, today: date, window_days: int = BaseConfig.DUE_SOON_DAYS
) -> bool:
    """True when billing falls between today and today + window, both inclusive."""

    return today <= subscription.billing_date <= today + timedelta(days=window_days)


def split_due_soon(
    subscriptions: Iterable[Subscription], *, today: date
) -> tuple[list[Subscription], list[Subscription]]:
    """Partition subscriptions into (due soon, everything else), keeping order."""

    due: list[Subscription] = []
    rest: list[Subscription] = []
    for sub in subscriptions:
        (due if is_due_soon(sub, today=today) else rest).append(sub)
    return due, rest


def notification_summary(subscriptions: Iterable[Subscription], *, today: date) -> DueNotice:
    due, _ = split_due_soon(subscriptions, today=today)
    return DueNotice(subscriptions=due, total_amount=sum(s.amount for s in due))


def add_subscription(
    repo: SubscriptionRepository,
    *,
    name: str,
    amount: float,
    billing_date: date,
    category: str,
    user_id: int,
) -> Subscription:
    name = (name or "").strip()
    category = (category or "").strip()
    if not name or not category or amount is None or billing_date is None:
        raise ValueError("Please fill in all required fields")
    if amount <= 0:
        raise ValueError("Amount must be greater than zero")
    subscription = repo.create(
        Subscription(
            name=name,
            amount=amount,
            billing_date=billing_date,
            category=category,
            user_id=user_id,
        ),
        user_id=user_id,
    )
    logger.info("Subscription added", extra={"user_id": user_id, "subscription_id": subscription.id})
    return subscription


def mark_paid(
    subscription_id: int,
    *,
    user_id: int,
    subscriptions: SubscriptionRepository,
    transactions: TransactionRepository,
    today: date,
) -> tuple[Transaction, Subscription]:
    """Record this cycle's payment and move the billing date forward.

    The expense is written first; if advancing the date fails afterwards the
    payment stays recorded.
    """

    subscription = subscriptions.get_by_id(subscription_id, user_id=user_id)
    if subscription is None:
        raise RecordNotFound(f"Subscription {subscription_id} was not found")

    payment = transactions.create(
        Transaction(
            amount=subscription.amount,
            type="expense",
            category=subscription.category,
            description=f"Subscription payment for {subscription.name}",
            occurred_on=today,
            user_id=user_id,
        ),
        user_id=user_id,
    )
    updated = subscriptions.set_billing_date(
        subscription_id, next_billing_date(subscription.billing_date), user_id=user_id
    )
    if updated is None:
        raise RecordNotFound(f"Subscription {subscription_id} was not found")
    logger.info(
        "Subscription marked paid",
        extra={
            "user_id": user_id,
            "subscription_id": subscription_id,
            "next_billing_date": updated.billing_date.isoformat(),
        },
    )
    return payment, updated
