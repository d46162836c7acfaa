"""Service module exports."""

from . import (
    assistant,
    auth,
    errors,
    ledger_service,
    portfolio,
    reports,
    splits,
    subscriptions,
)

__all__ = [
    "assistant",
    "auth",
    "errors",
    "ledger_service",
    "portfolio",
    "reports",
    "splits",
    "subscriptions",
]
