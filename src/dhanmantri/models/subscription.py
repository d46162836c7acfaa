"""Recurring subscription model."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import CheckConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


class Subscription(SQLModel, table=True):
    """A monthly bill with the date it next falls due."""

    __tablename__: ClassVar[str] = "subscription"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_subscription_amount_positive"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128)
    amount: float = Field(nullable=False)
    billing_date: date = Field(nullable=False, index=True)
    category: str = Field(nullable=False, max_length=64)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="subscriptions"))
