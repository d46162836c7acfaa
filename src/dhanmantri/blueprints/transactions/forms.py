"""Transaction form validation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ...models.transaction import TRANSACTION_TYPES, Transaction
from ..forms import BaseForm


@dataclass
class TransactionForm(BaseForm):
    """Represents transaction input prior to validation."""

    amount: Optional[float] = None
    type: str = "expense"
    category: str = ""
    occurred_on: Optional[date] = None
    description: str = ""

    _fields = ("amount", "type", "category", "date", "description")

    @classmethod
    def from_transaction(cls, tx: Transaction) -> "TransactionForm":
        return cls(
            amount=tx.amount,
            type=tx.type,
            category=tx.category,
            occurred_on=tx.occurred_on,
            description=tx.description or "",
        )

    def validate(self) -> bool:
        """Validate the bound data and populate typed attributes."""

        self.errors.clear()
        self.amount = self._amount("amount")

        self.type = self.raw_data.get("type", "").strip().lower() or "expense"
        if self.type not in TRANSACTION_TYPES:
            self._add_error("type", "Type must be income or expense.")

        self.category = self._required("category", "Category")
        if len(self.category) > 64:
            self._add_error("category", "Category must be 64 characters or fewer.")

        self.occurred_on = self._date("date")

        self.description = self.raw_data.get("description", "").strip()
        if len(self.description) > 255:
            self._add_error("description", "Description must be 255 characters or fewer.")

        return not self.errors

    def values(self) -> dict[str, str]:
        """Values for re-rendering the form."""

        if self.raw_data:
            return dict(self.raw_data)
        return {
            "amount": "" if self.amount is None else f"{self.amount:.2f}",
            "type": self.type,
            "category": self.category,
            "date": self.occurred_on.isoformat() if self.occurred_on else date.today().isoformat(),
            "description": self.description,
        }
