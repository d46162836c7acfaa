"""End-to-end tests for the web routes."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from conftest import TEST_PASSWORD, scheme_payload
from dhanmantri.infra.repositories import (
    SQLModelSipRepository,
    SQLModelSubscriptionRepository,
    SQLModelTransactionRepository,
)
from dhanmantri.models import SipInvestment, Subscription, Transaction
from dhanmantri.services import auth

JSON = {"Accept": "application/json"}


@pytest.fixture
def tx_repo(app_session_factory):
    return SQLModelTransactionRepository(app_session_factory)


@pytest.fixture
def intruder(app_session_factory):
    return auth.create_user(
        email="intruder@example.com",
        username="intruder",
        password=TEST_PASSWORD,
        session_factory=app_session_factory,
    )


def _add_tx(repo, owner_id, amount=100.0, txn_type="expense", category="Food", occurred_on=None):
    return repo.create(
        Transaction(
            amount=amount,
            type=txn_type,
            category=category,
            occurred_on=occurred_on or date.today(),
        ),
        user_id=owner_id,
    )


# -- auth ---------------------------------------------------------------------


def test_root_redirects_to_dashboard(logged_in_client):
    response = logged_in_client.get("/")
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/dashboard/")


@pytest.mark.parametrize(
    "path", ["/dashboard/", "/transactions/", "/subscriptions/", "/portfolio/", "/assistant/"]
)
def test_pages_require_login(client, path):
    response = client.get(path)
    assert response.status_code == 302
    assert "/auth/login" in response.headers["Location"]


def test_register_then_logout(client):
    response = client.post(
        "/auth/register",
        data={"email": "new@example.com", "username": "newbie", "password": "long-enough"},
    )
    assert response.status_code == 302
    assert client.get("/dashboard/").status_code == 200

    client.post("/auth/logout")
    assert client.get("/dashboard/").status_code == 302


def test_register_rejects_duplicate_email(client, app_user):
    response = client.post(
        "/auth/register",
        data={"email": app_user.email, "username": "someone", "password": "long-enough"},
    )
    assert response.status_code == 400
    assert b"already exists" in response.data


def test_login_with_wrong_password(client, app_user):
    response = client.post("/auth/login", data={"email": app_user.email, "password": "nope"})
    assert response.status_code == 401
    assert b"Invalid email or password" in response.data


def test_settings_password_mismatch(logged_in_client):
    response = logged_in_client.post(
        "/auth/settings/password",
        data={"new_password": "abcdef", "confirm_password": "abcdeg"},
        follow_redirects=True,
    )
    assert b"New passwords do not match!" in response.data


def test_settings_username_change(logged_in_client, app_user, app_session_factory):
    logged_in_client.post("/auth/settings/username", data={"username": "renamed"})
    assert auth.get_user(app_user.id, session_factory=app_session_factory).username == "renamed"


# -- transactions ---------------------------------------------------------------


def test_create_transaction_form(logged_in_client, tx_repo, app_user):
    response = logged_in_client.post(
        "/transactions/",
        data={
            "amount": "250.75",
            "type": "expense",
            "category": "Food",
            "date": "2025-03-10",
            "description": "Groceries",
        },
    )
    assert response.status_code == 302

    stored = tx_repo.list_all(user_id=app_user.id)
    assert [(t.amount, t.category, t.occurred_on) for t in stored] == [
        (250.75, "Food", date(2025, 3, 10))
    ]


def test_create_transaction_validation_error(logged_in_client, tx_repo, app_user):
    response = logged_in_client.post(
        "/transactions/",
        data={"amount": "-3", "type": "expense", "category": "", "date": "2025-03-10"},
    )
    assert response.status_code == 400
    assert b"Amount must be greater than zero." in response.data
    assert tx_repo.list_all(user_id=app_user.id) == []


def test_transaction_json_api(logged_in_client):
    created = logged_in_client.post(
        "/transactions/",
        json={"amount": 1200, "type": "income", "category": "Salary", "date": "2025-03-01"},
        headers=JSON,
    )
    assert created.status_code == 201
    assert created.get_json()["transaction"]["category"] == "Salary"

    listing = logged_in_client.get("/transactions/", headers=JSON).get_json()
    assert listing["summary"]["income"] == 1200
    assert len(listing["transactions"]) == 1


def test_list_filters_by_month(logged_in_client, tx_repo, app_user):
    _add_tx(tx_repo, app_user.id, amount=10, occurred_on=date(2024, 1, 15))
    _add_tx(tx_repo, app_user.id, amount=20, occurred_on=date(2024, 2, 15))

    payload = logged_in_client.get(
        "/transactions/?period=month&month=1&year=2024", headers=JSON
    ).get_json()
    assert [t["amount"] for t in payload["transactions"]] == [10]


def test_edit_and_delete_transaction(logged_in_client, tx_repo, app_user):
    tx = _add_tx(tx_repo, app_user.id)

    assert logged_in_client.get(f"/transactions/{tx.id}/edit").status_code == 200
    logged_in_client.post(
        f"/transactions/{tx.id}",
        data={"amount": "80", "type": "expense", "category": "Transport", "date": "2025-03-02"},
    )
    assert tx_repo.get_by_id(tx.id, user_id=app_user.id).category == "Transport"

    assert logged_in_client.post(f"/transactions/{tx.id}/delete").status_code == 302
    assert tx_repo.get_by_id(tx.id, user_id=app_user.id) is None


def test_other_users_transactions_are_not_found(logged_in_client, tx_repo, intruder):
    theirs = _add_tx(tx_repo, intruder.id, amount=999)

    assert logged_in_client.get(f"/transactions/{theirs.id}/edit").status_code == 404
    update = logged_in_client.post(
        f"/transactions/{theirs.id}",
        data={"amount": "1", "type": "expense", "category": "Food", "date": "2025-03-02"},
    )
    assert update.status_code == 404
    assert logged_in_client.post(f"/transactions/{theirs.id}/delete").status_code == 404
    assert tx_repo.get_by_id(theirs.id, user_id=intruder.id).amount == 999

    listing = logged_in_client.get("/transactions/", headers=JSON).get_json()
    assert listing["transactions"] == []


# -- dashboard --------------------------------------------------------------------


def test_dashboard_summary_and_due_notice(logged_in_client, tx_repo, app_user, app_session_factory):
    _add_tx(tx_repo, app_user.id, amount=5000, txn_type="income", category="Salary")
    _add_tx(tx_repo, app_user.id, amount=1200, category="Food")
    SQLModelSubscriptionRepository(app_session_factory).create(
        Subscription(name="Music", amount=119, billing_date=date.today(), category="Entertainment"),
        user_id=app_user.id,
    )

    payload = logged_in_client.get("/dashboard/", headers=JSON).get_json()
    assert payload["summary"] == {"income": 5000, "expenses": 1200, "balance": 3800}
    assert payload["categories"] == {"Salary": 5000, "Food": 1200}
    assert payload["due_soon"] == {"count": 1, "total_amount": 119}

    html = logged_in_client.get("/dashboard/").data.decode("utf-8")
    assert "You have 1 subscription due in the next week" in html


@pytest.mark.parametrize("chart", ["categories", "monthly"])
def test_dashboard_charts_are_png(logged_in_client, tx_repo, app_user, chart):
    _add_tx(tx_repo, app_user.id)
    response = logged_in_client.get(f"/dashboard/charts/{chart}.png?period=week")
    assert response.status_code == 200
    assert response.mimetype == "image/png"
    assert response.data.startswith(b"\x89PNG")


# -- subscriptions ----------------------------------------------------------------


def test_subscription_lifecycle(logged_in_client, tx_repo, app_user, app_session_factory):
    billing = date.today() + timedelta(days=3)
    response = logged_in_client.post(
        "/subscriptions/",
        data={
            "name": "Streaming",
            "amount": "649",
            "billing_date": billing.isoformat(),
            "category": "Entertainment",
        },
    )
    assert response.status_code == 302

    repo = SQLModelSubscriptionRepository(app_session_factory)
    (sub,) = repo.list_all(user_id=app_user.id)
    assert b"Mark as Paid" in logged_in_client.get("/subscriptions/").data

    paid = logged_in_client.post(f"/subscriptions/{sub.id}/pay", headers=JSON).get_json()
    assert paid["subscription"]["billing_date"] == (billing + timedelta(days=30)).isoformat()
    assert paid["payment"]["description"] == "Subscription payment for Streaming"
    assert tx_repo.list_all(user_id=app_user.id)[0].occurred_on == date.today()

    assert logged_in_client.post(f"/subscriptions/{sub.id}/delete").status_code == 302
    assert repo.list_all(user_id=app_user.id) == []


def test_subscription_requires_all_fields(logged_in_client):
    response = logged_in_client.post(
        "/subscriptions/", data={"name": "Gym", "amount": "", "billing_date": "", "category": ""},
        follow_redirects=True,
    )
    assert b"Please fill in all required fields" in response.data


def test_cannot_pay_someone_elses_subscription(logged_in_client, intruder, app_session_factory, tx_repo):
    sub = SQLModelSubscriptionRepository(app_session_factory).create(
        Subscription(name="Theirs", amount=10, billing_date=date.today(), category="Bills"),
        user_id=intruder.id,
    )
    assert logged_in_client.post(f"/subscriptions/{sub.id}/pay").status_code == 404
    assert tx_repo.list_all(user_id=intruder.id) == []


# -- portfolio --------------------------------------------------------------------


def test_portfolio_search_and_add(logged_in_client, fake_mfapi, app_user, app_session_factory):
    fake_mfapi.add("/mf/search", [{"schemeCode": 120503, "schemeName": "Example Bluechip Fund"}])
    fake_mfapi.add(
        "/mf/120503",
        scheme_payload(120503, "Example Bluechip Fund", [("10-01-2024", "100"), ("10-02-2024", "110")]),
    )

    results = logged_in_client.get("/portfolio/search?q=bluechip", headers=JSON).get_json()
    assert results["results"][0]["scheme_name"] == "Example Bluechip Fund"
    assert results["results"][0]["latest_nav"] == 110

    html = logged_in_client.get("/portfolio/search?q=bluechip").data.decode("utf-8")
    assert "Example Bluechip Fund" in html

    response = logged_in_client.post(
        "/portfolio/sips",
        data={"scheme_code": "120503", "monthly_amount": "1000", "start_date": "2024-01-10"},
    )
    assert response.status_code == 302
    (sip,) = SQLModelSipRepository(app_session_factory).list_all(user_id=app_user.id)
    assert sip.installments == 12

    holdings = logged_in_client.get("/portfolio/", headers=JSON).get_json()
    assert holdings["holdings"][0]["scheme_name"] == "Example Bluechip Fund"
    assert holdings["summary"]["total_investment"] > 0


def test_portfolio_search_too_short(logged_in_client):
    response = logged_in_client.get("/portfolio/search?q=ab", headers=JSON)
    assert response.status_code == 400
    assert "at least 3 characters" in response.get_json()["message"]


def test_portfolio_upstream_failure(logged_in_client):
    response = logged_in_client.get("/portfolio/search?q=missing", headers=JSON)
    assert response.status_code == 502
    assert response.get_json()["error"] == "upstream_error"


def test_remove_sip_scoped_to_owner(logged_in_client, intruder, app_session_factory):
    repo = SQLModelSipRepository(app_session_factory)
    sip = repo.create(
        SipInvestment(
            scheme_code="1",
            scheme_name="Theirs",
            monthly_amount=100,
            start_date=date(2024, 1, 1),
            installments=12,
        ),
        user_id=intruder.id,
    )
    assert logged_in_client.post(f"/portfolio/sips/{sip.id}/delete").status_code == 404
    assert repo.get_by_id(sip.id, user_id=intruder.id) is not None


# -- assistant --------------------------------------------------------------------


def test_assistant_page_shows_welcome(logged_in_client):
    html = logged_in_client.get("/assistant/").data.decode("utf-8")
    assert "I&#39;m your financial assistant" in html


def test_assistant_adds_transaction(logged_in_client, tx_repo, app_user):
    response = logged_in_client.post(
        "/assistant/messages",
        json={"message": "spent 300 on food for dinner", "date": "2025-03-05"},
        headers=JSON,
    )
    payload = response.get_json()

    assert payload["reply"] == "Added expense: ₹300 for food (dinner) on Mar 05, 2025"
    assert payload["transaction"]["date"] == "2025-03-05"
    assert tx_repo.list_all(user_id=app_user.id)[0].amount == 300


def test_assistant_history_is_capped(app, logged_in_client):
    limit = app.config["DHANMANTRI_CONFIG"].CHAT_HISTORY_LIMIT
    for _ in range(limit):
        logged_in_client.post("/assistant/messages", data={"message": "what's my balance"})

    with logged_in_client.session_transaction() as session:
        history = session["assistant_history"]
    assert len(history) == limit
    assert history[-1]["role"] == "assistant"
    assert history[-1]["text"].startswith("Your current balance is")


def test_assistant_rejects_empty_message(logged_in_client):
    response = logged_in_client.post("/assistant/messages", json={"message": "  "}, headers=JSON)
    assert response.status_code == 400


def test_assistant_ignores_non_string_date(logged_in_client):
    response = logged_in_client.post(
        "/assistant/messages",
        json={"message": "spent 300 on food for dinner", "date": 20250301},
        headers=JSON,
    )

    assert response.status_code == 200
    assert response.get_json()["transaction"]["date"] == date.today().isoformat()


def test_assistant_clear_restores_welcome(logged_in_client):
    logged_in_client.post("/assistant/messages", data={"message": "what's my balance"})
    with logged_in_client.session_transaction() as session:
        assert len(session["assistant_history"]) == 3

    response = logged_in_client.post("/assistant/clear", headers=JSON)
    assert response.get_json() == {"cleared": True}

    with logged_in_client.session_transaction() as session:
        assert "assistant_history" not in session
    html = logged_in_client.get("/assistant/").data.decode("utf-8")
    assert "I&#39;m your financial assistant" in html
    assert "what&#39;s my balance" not in html
