"""SQLModel table exports."""

from .portfolio import SipInvestment
from .splits import ExpenseGroup, ExpenseShare, GroupExpense, GroupMember
from .subscription import Subscription
from .transaction import Transaction
from .user import User

__all__ = [
    "ExpenseGroup",
    "ExpenseShare",
    "GroupExpense",
    "GroupMember",
    "SipInvestment",
    "Subscription",
    "Transaction",
    "User",
]
