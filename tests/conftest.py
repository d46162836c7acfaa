"""Pytest configuration and shared fixtures for Dhan Mantri tests.

This module provides database fixtures, test data factories, a fake
mutual-fund API and Flask app/client fixtures so tests never touch the real
app database or the network.
"""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from dhanmantri.infra.database import create_session_factory
from dhanmantri.infra.repositories import (
    SQLModelSipRepository,
    SQLModelSubscriptionRepository,
    SQLModelTransactionRepository,
)
from dhanmantri.models import Subscription, Transaction, User  # noqa: F401
from dhanmantri.services import auth as auth_service
from dhanmantri.services.portfolio import MutualFundClient

TEST_PASSWORD = "s3cret-pass"

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching what repositories and services expect."""

    return create_session_factory(db_engine)


@pytest.fixture
def transaction_repo(session_factory):
    return SQLModelTransactionRepository(session_factory)


@pytest.fixture
def subscription_repo(session_factory):
    return SQLModelSubscriptionRepository(session_factory)


@pytest.fixture
def sip_repo(session_factory):
    return SQLModelSipRepository(session_factory)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def user_factory(session_factory):
    """Factory for creating registered users.

    Returns:
        Callable: Function that creates and persists User instances
    """

    counter = {"n": 0}

    def _create_user(
        email: str | None = None,
        username: str | None = None,
        password: str = TEST_PASSWORD,
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        return auth_service.create_user(
            email=email or f"user{n}@example.com",
            username=username or f"user{n}",
            password=password,
            session_factory=session_factory,
        )

    return _create_user


@pytest.fixture
def user(user_factory) -> User:
    """Default user for scoping data."""

    return user_factory(email="tester@example.com", username="tester")


@pytest.fixture
def other_user(user_factory) -> User:
    return user_factory(email="other@example.com", username="other")


@pytest.fixture
def transaction_factory(transaction_repo, user):
    """Factory for creating test transactions.

    Returns:
        Callable: Function that creates and persists Transaction instances
    """

    def _create_transaction(
        amount: float,
        txn_type: str = "expense",
        category: str = "Food",
        occurred_on: date | None = None,
        description: str = "",
        owner: User | None = None,
    ) -> Transaction:
        owner = owner or user
        return transaction_repo.create(
            Transaction(
                amount=amount,
                type=txn_type,
                category=category,
                occurred_on=occurred_on or date.today(),
                description=description,
                user_id=owner.id,
            ),
            user_id=owner.id,
        )

    return _create_transaction


@pytest.fixture
def subscription_factory(subscription_repo, user):
    def _create_subscription(
        name: str = "Streaming",
        amount: float = 499.0,
        billing_date: date | None = None,
        category: str = "Entertainment",
        owner: User | None = None,
    ) -> Subscription:
        owner = owner or user
        return subscription_repo.create(
            Subscription(
                name=name,
                amount=amount,
                billing_date=billing_date or date.today(),
                category=category,
                user_id=owner.id,
            ),
            user_id=owner.id,
        )

    return _create_subscription


# =============================================================================
# Mutual-fund API fakes
# =============================================================================


class FakeResponse:
    def __init__(self, payload, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        import requests

        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Stands in for ``requests.Session`` and serves canned mfapi.in payloads."""

    def __init__(self):
        self.routes: dict[str, object] = {}
        self.calls: list[tuple[str, dict | None]] = []

    def add(self, path: str, payload, status_code: int = 200) -> None:
        self.routes[path] = (payload, status_code)

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, params))
        path = url.split("://", 1)[-1].split("/", 1)[-1]
        path = "/" + path
        if path not in self.routes:
            return FakeResponse({"error": "not found"}, status_code=404)
        payload, status_code = self.routes[path]
        return FakeResponse(payload, status_code=status_code)


def scheme_payload(code: int, name: str, navs: list[tuple[str, str]]) -> dict:
    return {
        "meta": {
            "fund_house": "Example Mutual Fund",
            "scheme_type": "Open Ended Schemes",
            "scheme_category": "Equity Scheme - Large Cap Fund",
            "scheme_code": code,
            "scheme_name": name,
        },
        "data": [{"date": d, "nav": nav} for d, nav in navs],
        "status": "SUCCESS",
    }


@pytest.fixture
def fake_mfapi():
    return FakeSession()


@pytest.fixture
def mf_client(fake_mfapi):
    return MutualFundClient("https://api.mfapi.test", timeout=1.0, session=fake_mfapi)


# =============================================================================
# Flask app fixtures
# =============================================================================


@pytest.fixture
def app(tmp_path, monkeypatch, mf_client):
    """Flask app backed by a throwaway data directory."""

    monkeypatch.setenv("DHANMANTRI_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("DHANMANTRI_DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("DHANMANTRI_SECRET_KEY", "test-secret")
    monkeypatch.setenv("DHANMANTRI_DEV_MODE", "true")
    monkeypatch.setenv("DHANMANTRI_CURRENCY_SYMBOL", "₹")

    from dhanmantri import create_app

    application = create_app("testing")
    application.extensions["dhanmantri"]["mutual_funds"] = mf_client
    yield application
    application.extensions["dhanmantri"]["engine"].dispose()


@pytest.fixture
def app_session_factory(app):
    return app.extensions["dhanmantri"]["session_factory"]


@pytest.fixture
def client(app):
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def app_user(app_session_factory) -> User:
    return auth_service.create_user(
        email="web@example.com",
        username="webuser",
        password=TEST_PASSWORD,
        session_factory=app_session_factory,
    )


@pytest.fixture
def logged_in_client(client, app_user):
    response = client.post(
        "/auth/login", data={"email": app_user.email, "password": TEST_PASSWORD}
    )
    assert response.status_code == 302
    return client
