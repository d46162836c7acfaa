"""Database, login and extension wiring for the Flask app."""

from __future__ import annotations

from typing import Optional

from flask import Flask, current_app
from flask_login import LoginManager, UserMixin

from .config import BaseConfig
from .infra.database import SessionFactory, create_db_engine, create_session_factory, init_database

login_manager = LoginManager()
login_manager.login_view = "auth.login"
login_manager.login_message = "Please sign in to continue."
login_manager.login_message_category = "info"


class AuthUser(UserMixin):
    """Detached view of a signed-in user kept on ``flask_login.current_user``."""

    def __init__(self, user_id: int, username: str, email: str) -> None:
        self.id = user_id
        self.username = username
        self.email = email

    @classmethod
    def from_model(cls, user) -> "AuthUser":
        return cls(user.id, user.username, user.email)


def init_db(app: Flask) -> None:
    """Initialize the SQLModel engine using configuration from the app."""

    config: BaseConfig = app.config["DHANMANTRI_CONFIG"]
    engine = create_db_engine(config)
    init_database(engine)

    state = app.extensions.setdefault("dhanmantri", {})
    state["engine"] = engine
    state["session_factory"] = create_session_factory(engine)


def init_login(app: Flask) -> None:
    """Attach flask-login and the user loader."""

    login_manager.init_app(app)

    @login_manager.user_loader
    def _load_user(user_id: str) -> Optional[AuthUser]:
        from .services import auth

        try:
            user = auth.get_user(int(user_id), session_factory=get_session_factory())
        except (TypeError, ValueError):
            return None
        return AuthUser.from_model(user) if user else None


def init_mutual_funds(app: Flask) -> None:
    """Share one mutual-fund API client across requests."""

    from .services.portfolio import MutualFundClient

    config: BaseConfig = app.config["DHANMANTRI_CONFIG"]
    state = app.extensions.setdefault("dhanmantri", {})
    state["mutual_funds"] = MutualFundClient(config.MFAPI_BASE_URL, timeout=config.MFAPI_TIMEOUT)


def get_mutual_fund_client():
    return current_app.extensions["dhanmantri"]["mutual_funds"]


def get_session_factory() -> SessionFactory:
    """Return the session factory repositories and services expect."""

    state = current_app.extensions.get("dhanmantri", {})
    factory = state.get("session_factory")
    if factory is None:  # pragma: no cover
        raise RuntimeError("Database engine not initialized")
    return factory

