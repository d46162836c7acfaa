"""Form binding shared by the blueprint forms."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, ClassVar, Optional


@dataclass
class BaseForm:
    """Binds raw request data and collects per-field errors."""

    errors: dict[str, list[str]] = field(default_factory=dict, init=False)
    raw_data: dict[str, str] = field(default_factory=dict, init=False)

    _fields: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]):
        """Create a form populated from request data."""

        form = cls()
        form.load(data)
        return form

    def load(self, data: Mapping[str, Any]) -> None:
        """Bind incoming mapping data to the form state."""

        self.raw_data = {}
        for key in self._fields:
            value = data.get(key)
            self.raw_data[key] = "" if value is None else str(value)

    def validate(self) -> bool:  # pragma: no cover - overridden
        raise NotImplementedError

    def _add_error(self, field_name: str, message: str) -> None:
        """Accumulate validation errors for a specific field."""

        self.errors.setdefault(field_name, []).append(message)

    def _required(self, key: str, label: str) -> str:
        value = self.raw_data.get(key, "").strip()
        if not value:
            self._add_error(key, f"{label} is required.")
        return value

    def _amount(self, key: str, label: str = "Amount") -> Optional[float]:
        raw = self.raw_data.get(key, "").strip()
        if not raw:
            self._add_error(key, f"{label} is required.")
            return None
        try:
            value = float(raw.replace(",", ""))
        except ValueError:
            self._add_error(key, f"Enter a valid number for the {label.lower()}.")
            return None
        if value <= 0:
            self._add_error(key, f"{label} must be greater than zero.")
            return None
        return value

    def _date(self, key: str, label: str = "Date") -> Optional[date]:
        raw = self.raw_data.get(key, "").strip()
        if not raw:
            self._add_error(key, f"{label} is required.")
            return None
        try:
            return datetime.strptime(raw, "%Y-%m-%d").date()
        except ValueError:
            self._add_error(key, "Enter a valid date (YYYY-MM-DD).")
            return None

    @property
    def first_error(self) -> str:
        for messages in self.errors.values():
            if messages:
                return messages[0]
        return ""
