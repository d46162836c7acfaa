"""Repository protocol definitions for domain layer."""

from .sip import SipRepository
from .subscription import SubscriptionRepository
from .transaction import TransactionRepository

__all__ = [
    "SipRepository",
    "SubscriptionRepository",
    "TransactionRepository",
]
