"""Exceptions shared by the service layer."""

from __future__ import annotations


class RecordNotFound(LookupError):
    """Raised when a row does not exist or belongs to another user."""
