"""Request helpers shared by the blueprints."""

from __future__ import annotations

from typing import Any

from flask import current_app, jsonify, request
from flask_login import current_user

from ..config import BaseConfig
from ..extensions import get_session_factory
from ..infra.repositories import (
    SQLModelSipRepository,
    SQLModelSubscriptionRepository,
    SQLModelTransactionRepository,
)


def prefers_json() -> bool:
    accepts = request.accept_mimetypes
    json_quality = accepts["application/json"]
    html_quality = accepts["text/html"]
    if request.is_json:
        return True
    if json_quality == 0:
        return False
    return json_quality > html_quality


def json_error(error: str, message: str, status: int):
    return jsonify({"error": error, "message": message}), status


def current_user_id() -> int:
    return int(current_user.id)


def app_config() -> BaseConfig:
    return current_app.config["DHANMANTRI_CONFIG"]


def transaction_repo() -> SQLModelTransactionRepository:
    return SQLModelTransactionRepository(get_session_factory())


def subscription_repo() -> SQLModelSubscriptionRepository:
    return SQLModelSubscriptionRepository(get_session_factory())


def sip_repo() -> SQLModelSipRepository:
    return SQLModelSipRepository(get_session_factory())


def form_data() -> dict[str, Any]:
    """Form fields, or the JSON body for API callers."""

    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict(flat=True)
