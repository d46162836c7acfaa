"""Portfolio routes."""

from __future__ import annotations

from datetime import date

from flask import abort, flash, jsonify, redirect, render_template, request, url_for

from ...extensions import get_mutual_fund_client
from ...logging_config import get_logger
from ...services.portfolio import (
    MutualFundLookupError,
    SchemeDetails,
    SipValuation,
    add_sip,
    portfolio_summary,
    value_portfolio,
)
from ..helpers import current_user_id, form_data, json_error, prefers_json, sip_repo
from . import bp
from .forms import SipForm

logger = get_logger("blueprints.portfolio")


def _serialize_scheme(scheme: SchemeDetails) -> dict:
    latest = scheme.latest
    return {
        "scheme_code": scheme.scheme_code,
        "scheme_name": scheme.scheme_name,
        "fund_house": scheme.fund_house,
        "scheme_category": scheme.scheme_category,
        "latest_nav": latest.nav if latest else None,
        "latest_nav_date": latest.on.isoformat() if latest else None,
    }


def _serialize_valuation(item: SipValuation) -> dict:
    return {
        "id": item.sip.id,
        "scheme_code": item.sip.scheme_code,
        "scheme_name": item.sip.scheme_name,
        "monthly_amount": item.sip.monthly_amount,
        "start_date": item.sip.start_date.isoformat(),
        "installments": item.sip.installments,
        "installments_paid": item.installments_paid,
        "units": round(item.total_units, 4),
        "total_investment": round(item.total_investment, 2),
        "current_value": round(item.current_value, 2),
        "absolute_returns": round(item.absolute_returns, 2),
        "cagr": round(item.cagr, 2),
    }


def _render_index(*, results: list[SchemeDetails] | None = None, term: str = "", status: int = 200):
    valuations, failed = value_portfolio(
        sip_repo(), get_mutual_fund_client(), user_id=current_user_id(), today=date.today()
    )
    if failed:
        flash(f"Could not fetch NAV data for: {', '.join(failed)}", "warning")
    return (
        render_template(
            "portfolio/index.html",
            valuations=valuations,
            summary=portfolio_summary(valuations),
            results=results or [],
            term=term,
            form_values={"start_date": date.today().isoformat(), "installments": "12"},
        ),
        status,
    )


@bp.get("/")
def list_portfolio():
    """Valued SIP holdings and portfolio totals."""

    if prefers_json():
        valuations, failed = value_portfolio(
            sip_repo(), get_mutual_fund_client(), user_id=current_user_id(), today=date.today()
        )
        return jsonify(
            {
                "holdings": [_serialize_valuation(v) for v in valuations],
                "summary": portfolio_summary(valuations),
                "unavailable": failed,
            }
        )
    return _render_index()


@bp.get("/search")
def search_schemes():
    term = (request.args.get("q") or "").strip()
    try:
        results = get_mutual_fund_client().search(term)
    except ValueError as exc:
        if prefers_json():
            return json_error("validation_error", str(exc), 400)
        flash(str(exc), "warning")
        return _render_index(term=term)
    except MutualFundLookupError as exc:
        logger.warning("Scheme search failed", extra={"term": term, "error": str(exc)})
        if prefers_json():
            return json_error("upstream_error", str(exc), 502)
        flash("Failed to fetch mutual fund data. Please try again.", "danger")
        return _render_index(term=term)

    if prefers_json():
        return jsonify({"results": [_serialize_scheme(s) for s in results]})
    if not results:
        flash("No mutual funds found matching your search", "info")
    return _render_index(results=results, term=term)


@bp.post("/sips")
def create_sip():
    form = SipForm.from_mapping(form_data())
    if not form.validate():
        if prefers_json():
            return json_error("validation_error", form.first_error, 400)
        flash(form.first_error, "danger")
        return redirect(url_for("portfolio.list_portfolio"))

    try:
        sip = add_sip(
            sip_repo(),
            get_mutual_fund_client(),
            scheme_code=form.scheme_code,
            monthly_amount=form.monthly_amount,
            start_date=form.start_date,
            installments=form.installments,
            user_id=current_user_id(),
        )
    except ValueError as exc:
        if prefers_json():
            return json_error("validation_error", str(exc), 400)
        flash(str(exc), "danger")
        return redirect(url_for("portfolio.list_portfolio"))
    except MutualFundLookupError as exc:
        logger.warning(
            "Scheme lookup failed while adding SIP",
            extra={"scheme_code": form.scheme_code, "error": str(exc)},
        )
        if prefers_json():
            return json_error("upstream_error", str(exc), 502)
        flash("Failed to fetch mutual fund data. Please try again.", "danger")
        return redirect(url_for("portfolio.list_portfolio"))

    if prefers_json():
        return jsonify({"sip": {"id": sip.id, "scheme_name": sip.scheme_name}}), 201
    flash(f"Added SIP in {sip.scheme_name}", "success")
    return redirect(url_for("portfolio.list_portfolio"))


@bp.post("/sips/<int:sip_id>/delete")
def delete_sip(sip_id: int):
    if not sip_repo().delete(sip_id, user_id=current_user_id()):
        abort(404)
    logger.info("SIP removed", extra={"user_id": current_user_id(), "sip_id": sip_id})
    if prefers_json():
        return jsonify({"deleted": sip_id})
    flash("SIP removed", "success")
    return redirect(url_for("portfolio.list_portfolio"))
