"""Subscriptions blueprint package."""

from __future__ import annotations

from flask import Blueprint
from flask_login import login_required

bp = Blueprint(
    "subscriptions",
    __name__,
    url_prefix="/subscriptions",
    template_folder="../../templates/subscriptions",
)


@bp.before_request
@login_required
def _require_login():
    """Every subscriptions page needs a signed-in user."""

    return None


from . import routes  # noqa: E402,F401 - ensure routes get registered

__all__ = ["bp"]
