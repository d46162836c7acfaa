"""SQLModel definitions for income/expense transactions."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import CheckConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover - import guard for circular dependency
    from .user import User

TRANSACTION_TYPES = ("income", "expense")


class Transaction(SQLModel, table=True):
    """A single income or expense entry owned by one user."""

    __tablename__: ClassVar[str] = "transaction"
    __table_args__ = (
        CheckConstraint("type IN ('income', 'expense')", name="ck_transaction_type"),
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    amount: float = Field(nullable=False, description="Always positive; see type")
    type: str = Field(default="expense", nullable=False, max_length=16)
    category: str = Field(nullable=False, max_length=64, index=True)
    occurred_on: date = Field(nullable=False, index=True)
    description: str = Field(default="", max_length=255)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="transactions"))

    @property
    def is_income(self) -> bool:
        return self.type == "income"
