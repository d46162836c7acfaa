"""Blueprint exports."""

from . import assistant, auth, dashboard, portfolio, subscriptions, transactions

__all__ = [
    "assistant",
    "auth",
    "dashboard",
    "portfolio",
    "subscriptions",
    "transactions",
]
