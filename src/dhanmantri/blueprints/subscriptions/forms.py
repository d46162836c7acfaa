"""Subscription form validation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..forms import BaseForm

REQUIRED_MESSAGE = "Please fill in all required fields"


@dataclass
class SubscriptionForm(BaseForm):
    name: str = ""
    amount: Optional[float] = None
    billing_date: Optional[date] = None
    category: str = ""

    _fields = ("name", "amount", "billing_date", "category")

    def validate(self) -> bool:
        self.errors.clear()
        if any(not self.raw_data.get(key, "").strip() for key in self._fields):
            self._add_error("form", REQUIRED_MESSAGE)
            return False

        self.name = self.raw_data["name"].strip()
        self.category = self.raw_data["category"].strip()
        self.amount = self._amount("amount")
        self.billing_date = self._date("billing_date", "Billing date")
        return not self.errors
