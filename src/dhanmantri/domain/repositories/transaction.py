"""Transaction repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.transaction import Transaction


class TransactionRepository(Protocol):
    """Repository for managing transaction entities."""

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        ...

    def list_all(self, *, user_id: int) -> list[Transaction]:
        """List every transaction, newest first."""
        ...

    def filter_by_date_range(
        self, start_date: date, end_date: date, *, user_id: int
    ) -> list[Transaction]:
        """Get transactions within an inclusive date range."""
        ...

    def create(self, transaction: Transaction, *, user_id: int) -> Transaction:
        """Create a new transaction."""
        ...

    def update(self, transaction_id: int, changes: dict, *, user_id: int) -> Optional[Transaction]:
        """Apply ``changes`` to an owned transaction."""
        ...

    def delete(self, transaction_id: int, *, user_id: int) -> bool:
        """Delete a transaction by ID."""
        ...
