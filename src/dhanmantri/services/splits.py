"""Shared expense groups: equal splits between members and settlement."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_DOWN, Decimal

from sqlmodel import Session, select

from ..infra.database import SessionFactory
from ..logging_config import get_logger
from ..models.splits import ExpenseGroup, ExpenseShare, GroupExpense, GroupMember
from ..models.user import User
from .errors import RecordNotFound

logger = get_logger("splits")

_CENT = Decimal("0.01")


def equal_split(amount: float, members: int) -> tuple[Decimal, Decimal]:
    """Return ``(per_member, payer_share)`` for an equal split.

    Every member owes the same amount rounded down to the cent; the payer's
    own share absorbs whatever is left so the parts always add up.
    """

    if members < 1:
        raise ValueError("A split needs at least one member")
    total = Decimal(str(amount)).quantize(_CENT)
    per_member = (total / members).quantize(_CENT, rounding=ROUND_DOWN)
    return per_member, total - per_member * (members - 1)


def _member_ids(session: Session, group_id: int) -> list[int]:
    rows = session.exec(
        select(GroupMember.user_id)
        .where(GroupMember.group_id == group_id)
        .order_by(GroupMember.joined_at, GroupMember.user_id)  # type: ignore
    ).all()
    return list(rows)


def _visible_group(session: Session, group_id: int, user_id: int) -> ExpenseGroup:
    group = session.get(ExpenseGroup, group_id)
    if group is None or user_id not in _member_ids(session, group_id):
        raise RecordNotFound(f"Group {group_id} was not found")
    return group


def create_group(*, name: str, user_id: int, session_factory: SessionFactory) -> ExpenseGroup:
    """Create a group; the creator becomes its first member."""

    name = (name or "").strip()
    if not name:
        raise ValueError("Group name is required")
    with session_factory() as session:
        group = ExpenseGroup(name=name, created_by=user_id)
        session.add(group)
        session.flush()
        session.add(GroupMember(group_id=group.id, user_id=user_id))
        session.commit()
        session.refresh(group)
        session.expunge(group)
    logger.info("Expense group created", extra={"user_id": user_id, "group_id": group.id})
    return group


def add_member(
    group_id: int, *, member_id: int, user_id: int, session_factory: SessionFactory
) -> GroupMember:
    """Add ``member_id`` to the group. Only the creator may do this."""

    with session_factory() as session:
        group = _visible_group(session, group_id, user_id)
        if group.created_by != user_id:
            raise ValueError("Only the group creator can add members")
        if session.get(User, member_id) is None:
            raise ValueError("User not found")
        if member_id in _member_ids(session, group_id):
            raise ValueError("User is already a member of this group")
        member = GroupMember(group_id=group_id, user_id=member_id)
        session.add(member)
        session.commit()
        session.refresh(member)
        session.expunge(member)
        return member


def record_expense(
    group_id: int,
    *,
    amount: float,
    description: str,
    user_id: int,
    session_factory: SessionFactory,
) -> GroupExpense:
    """Record an expense paid by ``user_id`` and split it across the group.

    A pending share is created for every other member.
    """

    description = (description or "").strip()
    if not description:
        raise ValueError("Description is required")
    if amount is None or amount <= 0:
        raise ValueError("Amount must be greater than zero")

    with session_factory() as session:
        _visible_group(session, group_id, user_id)
        others = [m for m in _member_ids(session, group_id) if m != user_id]
        per_member, _ = equal_split(amount, len(others) + 1)
        if others and per_member <= 0:
            raise ValueError("Amount is too small to split")

        expense = GroupExpense(
            group_id=group_id, amount=amount, description=description, paid_by=user_id
        )
        session.add(expense)
        session.flush()
        for member_id in others:
            session.add(
                ExpenseShare(expense_id=expense.id, user_id=member_id, amount=float(per_member))
            )
        session.commit()
        session.refresh(expense)
        session.expunge(expense)
    logger.info(
        "Group expense recorded",
        extra={"group_id": group_id, "expense_id": expense.id, "shares": len(others)},
    )
    return expense


def settle_share(expense_id: int, *, user_id: int, session_factory: SessionFactory) -> ExpenseShare:
    """Mark the acting user's share of an expense as settled."""

    with session_factory() as session:
        share = session.get(ExpenseShare, (expense_id, user_id))
        if share is None:
            raise RecordNotFound(f"No share of expense {expense_id} for this user")
        if share.status == "settled":
            raise ValueError("Share is already settled")
        share.status = "settled"
        share.settled_at = datetime.now(timezone.utc)
        session.add(share)
        session.commit()
        session.refresh(share)
        session.expunge(share)
        return share


def list_groups(*, user_id: int, session_factory: SessionFactory) -> list[ExpenseGroup]:
    with session_factory() as session:
        groups = list(
            session.exec(
                select(ExpenseGroup)
                .join(GroupMember, GroupMember.group_id == ExpenseGroup.id)
                .where(GroupMember.user_id == user_id)
                .order_by(ExpenseGroup.created_at, ExpenseGroup.id)  # type: ignore
            ).all()
        )
        session.expunge_all()
        return groups


def list_expenses(
    group_id: int, *, user_id: int, session_factory: SessionFactory
) -> list[GroupExpense]:
    with session_factory() as session:
        _visible_group(session, group_id, user_id)
        expenses = list(
            session.exec(
                select(GroupExpense)
                .where(GroupExpense.group_id == group_id)
                .order_by(GroupExpense.created_at.desc(), GroupExpense.id.desc())  # type: ignore
            ).all()
        )
        session.expunge_all()
        return expenses


def outstanding_shares(*, user_id: int, session_factory: SessionFactory) -> list[ExpenseShare]:
    """Pending shares the user still owes, oldest expense first."""

    with session_factory() as session:
        shares = list(
            session.exec(
                select(ExpenseShare)
                .where(ExpenseShare.user_id == user_id)
                .where(ExpenseShare.status == "pending")
                .order_by(ExpenseShare.expense_id)  # type: ignore
            ).all()
        )
        session.expunge_all()
        return shares
