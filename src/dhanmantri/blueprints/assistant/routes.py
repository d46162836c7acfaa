"""Assistant chat routes."""

from __future__ import annotations

from datetime import date, datetime

from flask import jsonify, redirect, render_template, session, url_for

from ...logging_config import get_logger
from ...services.assistant import ERROR_MESSAGE, WELCOME_MESSAGE, Assistant
from ..helpers import app_config, current_user_id, form_data, json_error, prefers_json, transaction_repo
from . import bp

logger = get_logger("blueprints.assistant")

HISTORY_KEY = "assistant_history"


def _history() -> list[dict[str, str]]:
    history = session.get(HISTORY_KEY)
    if not history:
        history = [{"role": "assistant", "text": WELCOME_MESSAGE}]
    return list(history)


def _append(history: list[dict[str, str]], role: str, text: str) -> list[dict[str, str]]:
    history.append({"role": role, "text": text})
    return history[-app_config().CHAT_HISTORY_LIMIT :]


def _parse_selected_date(raw) -> date | None:
    if not raw:
        return None
    try:
        return datetime.strptime(str(raw).strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


@bp.get("/")
def chat():
    return render_template(
        "assistant/index.html",
        history=_history(),
        selected_date=date.today().isoformat(),
    )


@bp.post("/messages")
def send_message():
    """Answer one chat message and keep it in the conversation."""

    data = form_data()
    message = str(data.get("message") or "")
    selected = _parse_selected_date(data.get("date"))

    assistant = Assistant(transaction_repo(), currency_symbol=app_config().CURRENCY_SYMBOL)
    try:
        reply = assistant.reply(message, user_id=current_user_id(), selected_date=selected)
    except Exception:
        logger.exception("Assistant failed to answer", extra={"user_id": current_user_id()})
        reply = None
        text = ERROR_MESSAGE
    else:
        if reply is None:
            if prefers_json():
                return json_error("validation_error", "Message is empty.", 400)
            return redirect(url_for("assistant.chat"))
        text = reply.text

    history = _append(_history(), "user", message.strip())
    session[HISTORY_KEY] = _append(history, "assistant", text)

    if prefers_json():
        if reply is None:
            return jsonify({"reply": text, "transaction": None}), 500
        return jsonify(reply.as_dict())
    return redirect(url_for("assistant.chat"))


@bp.post("/clear")
def clear_history():
    session.pop(HISTORY_KEY, None)
    if prefers_json():
        return jsonify({"cleared": True})
    return redirect(url_for("assistant.chat"))
