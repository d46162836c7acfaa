"""Portfolio form validation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..forms import BaseForm

DEFAULT_INSTALLMENTS = 12


@dataclass
class SipForm(BaseForm):
    """A monthly SIP into one scheme."""

    scheme_code: str = ""
    monthly_amount: Optional[float] = None
    start_date: Optional[date] = None
    installments: int = DEFAULT_INSTALLMENTS

    _fields = ("scheme_code", "monthly_amount", "start_date", "installments")

    def validate(self) -> bool:
        self.errors.clear()
        self.scheme_code = self._required("scheme_code", "Scheme")
        self.monthly_amount = self._amount("monthly_amount", "Monthly amount")
        self.start_date = self._date("start_date", "Start date")

        raw = self.raw_data.get("installments", "").strip()
        if not raw:
            self.installments = DEFAULT_INSTALLMENTS
        else:
            try:
                self.installments = int(raw)
            except ValueError:
                self._add_error("installments", "Installments must be a whole number.")
            else:
                if not 1 <= self.installments <= 600:
                    self._add_error("installments", "Installments must be between 1 and 600.")
        return not self.errors
