"""Shared-expense splitting tables."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import CheckConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

SHARE_STATUSES = ("pending", "settled")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExpenseGroup(SQLModel, table=True):
    """A set of users who split expenses between them."""

    __tablename__: ClassVar[str] = "expense_group"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=128)
    created_by: int = Field(foreign_key="user.id", nullable=False, index=True)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)

    members = Relationship(
        sa_relationship=relationship(
            "GroupMember", back_populates="group", cascade="all, delete-orphan"
        ),
    )
    expenses = Relationship(
        sa_relationship=relationship(
            "GroupExpense", back_populates="group", cascade="all, delete-orphan"
        ),
    )


class GroupMember(SQLModel, table=True):
    __tablename__: ClassVar[str] = "group_member"

    group_id: int = Field(foreign_key="expense_group.id", primary_key=True)
    user_id: int = Field(foreign_key="user.id", primary_key=True)
    joined_at: datetime = Field(default_factory=_utcnow, nullable=False)

    group = Relationship(sa_relationship=relationship("ExpenseGroup", back_populates="members"))


class GroupExpense(SQLModel, table=True):
    """An expense paid by one member on behalf of the group."""

    __tablename__: ClassVar[str] = "group_expense"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_group_expense_amount_positive"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    group_id: int = Field(foreign_key="expense_group.id", nullable=False, index=True)
    amount: float = Field(nullable=False)
    description: str = Field(nullable=False, max_length=255)
    paid_by: int = Field(foreign_key="user.id", nullable=False)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)

    group = Relationship(sa_relationship=relationship("ExpenseGroup", back_populates="expenses"))
    shares = Relationship(
        sa_relationship=relationship(
            "ExpenseShare", back_populates="expense", cascade="all, delete-orphan"
        ),
    )


class ExpenseShare(SQLModel, table=True):
    """What one member owes the payer of a group expense."""

    __tablename__: ClassVar[str] = "expense_share"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expense_share_amount_positive"),
        CheckConstraint("status IN ('pending', 'settled')", name="ck_expense_share_status"),
    )

    expense_id: int = Field(foreign_key="group_expense.id", primary_key=True)
    user_id: int = Field(foreign_key="user.id", primary_key=True)
    amount: float = Field(nullable=False)
    status: str = Field(default="pending", nullable=False, max_length=16)
    settled_at: Optional[datetime] = Field(default=None)

    expense = Relationship(sa_relationship=relationship("GroupExpense", back_populates="shares"))
