"""Portfolio blueprint package."""

from __future__ import annotations

from flask import Blueprint
from flask_login import login_required

bp = Blueprint(
    "portfolio",
    __name__,
    url_prefix="/portfolio",
    template_folder="../../templates/portfolio",
)


@bp.before_request
@login_required
def _require_login():
    """Every portfolio page needs a signed-in user."""

    return None


from . import routes  # noqa: E402,F401 - ensure routes get registered

__all__ = ["bp"]
