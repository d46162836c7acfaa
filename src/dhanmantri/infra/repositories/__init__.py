"""Concrete repository implementations using SQLModel."""

from .sip import SQLModelSipRepository
from .subscription import SQLModelSubscriptionRepository
from .transaction import SQLModelTransactionRepository

__all__ = [
    "SQLModelSipRepository",
    "SQLModelSubscriptionRepository",
    "SQLModelTransactionRepository",
]
