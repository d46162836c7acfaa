"""Subscription repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.subscription import Subscription


class SubscriptionRepository(Protocol):
    """Repository for managing recurring subscriptions."""

    def get_by_id(self, subscription_id: int, *, user_id: int) -> Optional[Subscription]:
        ...

    def list_all(self, *, user_id: int) -> list[Subscription]:
        """List subscriptions ordered by next billing date."""
        ...

    def create(self, subscription: Subscription, *, user_id: int) -> Subscription:
        ...

    def set_billing_date(
        self, subscription_id: int, billing_date: date, *, user_id: int
    ) -> Optional[Subscription]:
        ...

    def delete(self, subscription_id: int, *, user_id: int) -> bool:
        ...
