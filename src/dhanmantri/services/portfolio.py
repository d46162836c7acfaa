"""Mutual-fund SIP portfolio: NAV lookups and return calculations."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Optional

import requests

from ..domain.repositories import SipRepository
from ..logging_config import get_logger
from ..models.portfolio import SipInvestment

logger = get_logger("portfolio")

NAV_DATE_FORMAT = "%d-%m-%Y"
MIN_SEARCH_LENGTH = 3
SEARCH_RESULT_LIMIT = 5


class MutualFundLookupError(RuntimeError):
    """Raised when the mutual-fund API cannot be reached or answers nonsense."""


@dataclass(frozen=True)
class NavPoint:
    on: date
    nav: float


@dataclass(frozen=True)
class SchemeDetails:
    """Scheme metadata plus its NAV history (newest first, as served)."""

    scheme_code: str
    scheme_name: str
    fund_house: str
    scheme_type: str
    scheme_category: str
    history: list[NavPoint]

    @property
    def latest(self) -> Optional[NavPoint]:
        return max(self.history, key=lambda p: p.on) if self.history else None


@dataclass(frozen=True)
class SipValuation:
    sip: SipInvestment
    installments_paid: int
    total_units: float
    total_investment: float
    current_value: float
    absolute_returns: float
    cagr: float


def parse_nav_date(raw: str) -> date:
    return datetime.strptime(raw, NAV_DATE_FORMAT).date()


def parse_history(rows: Iterable[dict[str, Any]]) -> list[NavPoint]:
    """Convert API ``data`` rows into NAV points, skipping malformed entries."""

    points: list[NavPoint] = []
    for row in rows:
        try:
            points.append(NavPoint(on=parse_nav_date(row["date"]), nav=float(row["nav"])))
        except (KeyError, TypeError, ValueError):
            continue
    return points


class MutualFundClient:
    """Thin wrapper around the public mfapi.in endpoints."""

    def __init__(
        self,
        base_url: str = "https://api.mfapi.in",
        *,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_json(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(
                url, params=params, headers={"Accept": "application/json"}, timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            logger.warning("Mutual fund request failed", extra={"url": url, "error": str(exc)})
            raise MutualFundLookupError("Failed to fetch mutual fund data. Please try again.") from exc
        except ValueError as exc:
            raise MutualFundLookupError("Invalid response format") from exc

    def scheme(self, scheme_code: str | int) -> SchemeDetails:
        """Fetch metadata and NAV history for one scheme."""

        payload = self._get_json(f"/mf/{scheme_code}")
        if not isinstance(payload, dict) or not isinstance(payload.get("meta"), dict):
            raise MutualFundLookupError("Invalid response format")
        meta = payload["meta"]
        return SchemeDetails(
            scheme_code=str(meta.get("scheme_code", scheme_code)),
            scheme_name=meta.get("scheme_name", ""),
            fund_house=meta.get("fund_house", ""),
            scheme_type=meta.get("scheme_type", ""),
            scheme_category=meta.get("scheme_category", ""),
            history=parse_history(payload.get("data") or []),
        )

    def search(self, term: str) -> list[SchemeDetails]:
        """Search schemes by name and return details for the first few hits."""

        term = (term or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            raise ValueError("Please enter at least 3 characters to search")
        payload = self._get_json("/mf/search", params={"q": term})
        if not isinstance(payload, list):
            raise MutualFundLookupError("Invalid response format")
        codes = [row["schemeCode"] for row in payload[:SEARCH_RESULT_LIMIT] if "schemeCode" in row]
        return [self.scheme(code) for code in codes]


def closest_nav(history: list[NavPoint], target: date) -> NavPoint:
    """NAV entry whose date is nearest ``target``; later entries win ties."""

    if not history:
        raise ValueError("NAV history is empty")
    best = history[0]
    for point in history[1:]:
        if abs((point.on - target).days) <= abs((best.on - target).days):
            best = point
    return best


def add_months(start: date, months: int) -> date:
    """Shift by calendar months, clamping the day to the target month's end."""

    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def whole_months_between(start: date, end: date) -> int:
    """Full calendar months elapsed from ``start`` to ``end``."""

    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(months, 0)


def calculate_cagr(initial_value: float, final_value: float, years: float) -> float:
    """Compound annual growth rate as a percentage."""

    if years == 0 or initial_value == 0:
        return 0.0
    return ((final_value / initial_value) ** (1 / years) - 1) * 100


def calculate_sip_returns(
    history: list[NavPoint],
    monthly_amount: float,
    start: date,
    installments: int,
    *,
    today: date,
) -> dict[str, float]:
    total_units = 0.0
    total_investment = 0.0
    paid = 0
    for i in range(installments):
        invested_on = add_months(start, i)
        if invested_on > today:
            continue
        nav = closest_nav(history, invested_on).nav
        total_units += monthly_amount / nav
        total_investment += monthly_amount
        paid += 1

    current_nav = closest_nav(history, today).nav if history else 0.0
    current_value = total_units * current_nav
    years = whole_months_between(start, today) / 12
    return {
        "installments_paid": paid,
        "total_units": total_units,
        "total_investment": total_investment,
        "current_value": current_value,
        "absolute_returns": current_value - total_investment,
        "cagr": calculate_cagr(total_investment, current_value, years),
    }


def value_sip(sip: SipInvestment, history: list[NavPoint], *, today: date) -> SipValuation:
    returns = calculate_sip_returns(
        history, sip.monthly_amount, sip.start_date, sip.installments, today=today
    )
    return SipValuation(sip=sip, **returns)


def portfolio_summary(valuations: Iterable[SipValuation]) -> dict[str, float]:
    """Totals across holdings with the overall return percentage."""

    items = list(valuations)
    invested = sum(v.total_investment for v in items)
    current = sum(v.current_value for v in items)
    returns = current - invested
    return {
        "total_investment": invested,
        "current_value": current,
        "absolute_returns": returns,
        "returns_percent": (returns / invested * 100) if invested else 0.0,
    }


def value_portfolio(
    repo: SipRepository,
    client: MutualFundClient,
    *,
    user_id: int,
    today: date,
) -> tuple[list[SipValuation], list[str]]:
    """Value every SIP the user holds.

    Returns the valuations plus the names of schemes whose NAV history could
    not be fetched; those are left out of the totals.
    """

    valuations: list[SipValuation] = []
    failed: list[str] = []
    history_cache: dict[str, list[NavPoint]] = {}
    for sip in repo.list_all(user_id=user_id):
        try:
            if sip.scheme_code not in history_cache:
                history_cache[sip.scheme_code] = client.scheme(sip.scheme_code).history
            history = history_cache[sip.scheme_code]
            if not history:
                raise MutualFundLookupError(f"No NAV history for {sip.scheme_code}")
        except MutualFundLookupError:
            failed.append(sip.scheme_name)
            continue
        valuations.append(value_sip(sip, history, today=today))
    return valuations, failed


def add_sip(
    repo: SipRepository,
    client: MutualFundClient,
    *,
    scheme_code: str,
    monthly_amount: Optional[float],
    start_date: Optional[date],
    installments: Optional[int],
    user_id: int,
) -> SipInvestment:
    """Validate the SIP form and persist it with the scheme's current name."""

    scheme_code = (scheme_code or "").strip()
    if not scheme_code or monthly_amount is None or start_date is None or not installments:
        raise ValueError("Please fill in all fields")
    if monthly_amount <= 0:
        raise ValueError("Monthly amount must be greater than zero")
    if installments <= 0:
        raise ValueError("Installments must be at least 1")

    details = client.scheme(scheme_code)
    sip = repo.create(
        SipInvestment(
            scheme_code=details.scheme_code,
            scheme_name=details.scheme_name,
            monthly_amount=monthly_amount,
            start_date=start_date,
            installments=installments,
            user_id=user_id,
        ),
        user_id=user_id,
    )
    logger.info("SIP added", extra={"user_id": user_id, "scheme_code": sip.scheme_code})
    return sip
