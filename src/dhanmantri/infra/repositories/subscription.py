"""SQLModel implementation of Subscription repository."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlmodel import select

from ...models.subscription import Subscription
from ..database import SessionFactory


class SQLModelSubscriptionRepository:
    """SQLModel-based subscription repository scoped to the owning user."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, subscription_id: int, *, user_id: int) -> Optional[Subscription]:
        with self.session_factory() as session:
            obj = session.exec(
                select(Subscription)
                .where(Subscription.id == subscription_id)
                .where(Subscription.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[Subscription]:
        """List subscriptions ordered by next billing date."""
        with self.session_factory() as session:
            statement = (
                select(Subscription)
                .where(Subscription.user_id == user_id)
                .order_by(Subscription.billing_date.asc(), Subscription.id.asc())  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, subscription: Subscription, *, user_id: int) -> Subscription:
        with self.session_factory() as session:
            subscription.user_id = user_id
            session.add(subscription)
            session.commit()
            session.refresh(subscription)
            session.expunge(subscription)
            return subscription

    def set_billing_date(
        self, subscription_id: int, billing_date: date, *, user_id: int
    ) -> Optional[Subscription]:
        """Move the next billing date of an owned subscription."""
        with self.session_factory() as session:
            subscription = session.exec(
                select(Subscription)
                .where(Subscription.id == subscription_id)
                .where(Subscription.user_id == user_id)
            ).first()
            if subscription is None:
                return None
            subscription.billing_date = billing_date
            session.add(subscription)
            session.commit()
            session.refresh(subscription)
            session.expunge(subscription)
            return subscription

    def delete(self, subscription_id: int, *, user_id: int) -> bool:
        with self.session_factory() as session:
            subscription = session.exec(
                select(Subscription)
                .where(Subscription.id == subscription_id)
                .where(Subscription.user_id == user_id)
            ).first()
            if subscription is None:
                return False
            session.delete(subscription)
            session.commit()
            return True
