"""Authentication routes."""

from __future__ import annotations

from flask import flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user, logout_user

from ...extensions import AuthUser, get_session_factory
from ...logging_config import get_logger
from ...services import auth as auth_service
from ..helpers import current_user_id, form_data
from . import bp
from .forms import LoginForm, PasswordForm, RegisterForm, UsernameForm

logger = get_logger("blueprints.auth")


def _safe_next(target: str | None) -> str:
    """Only follow same-site relative redirects."""

    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("dashboard.index")


@bp.route("/login", methods=["GET", "POST"])
def login():
    if current_user.is_authenticated:
        return redirect(url_for("dashboard.index"))

    form = LoginForm()
    if request.method == "POST":
        form = LoginForm.from_mapping(form_data())
        if form.validate():
            user = auth_service.authenticate(
                email=form.email,
                password=form.password,
                session_factory=get_session_factory(),
            )
            if user is not None:
                login_user(AuthUser.from_model(user))
                logger.info("User signed in", extra={"user_id": user.id})
                return redirect(_safe_next(request.args.get("next")))
            flash("Invalid email or password", "danger")
            return render_template("auth/login.html", form=form), 401
        flash(form.first_error, "danger")
        return render_template("auth/login.html", form=form), 400

    return render_template("auth/login.html", form=form)


@bp.route("/register", methods=["GET", "POST"])
def register():
    if current_user.is_authenticated:
        return redirect(url_for("dashboard.index"))

    form = RegisterForm()
    if request.method == "POST":
        form = RegisterForm.from_mapping(form_data())
        if not form.validate():
            flash(form.first_error, "danger")
            return render_template("auth/register.html", form=form), 400
        try:
            user = auth_service.create_user(
                email=form.email,
                username=form.username,
                password=form.password,
                session_factory=get_session_factory(),
            )
        except ValueError as exc:
            flash(str(exc), "danger")
            return render_template("auth/register.html", form=form), 400

        login_user(AuthUser.from_model(user))
        flash("Welcome aboard!", "success")
        return redirect(url_for("dashboard.index"))

    return render_template("auth/register.html", form=form)


@bp.route("/logout", methods=["GET", "POST"])
@login_required
def logout():
    logger.info("User signed out", extra={"user_id": current_user_id()})
    logout_user()
    flash("You have been signed out.", "info")
    return redirect(url_for("auth.login"))


@bp.get("/settings")
@login_required
def settings():
    return render_template(
        "auth/settings.html",
        username_form=UsernameForm(username=current_user.username),
        password_form=PasswordForm(),
    )


@bp.post("/settings/username")
@login_required
def update_username():
    form = UsernameForm.from_mapping(form_data())
    if not form.validate():
        flash(form.first_error, "danger")
        return redirect(url_for("auth.settings"))
    try:
        auth_service.update_username(
            user_id=current_user_id(),
            username=form.username,
            session_factory=get_session_factory(),
        )
    except ValueError as exc:
        flash(str(exc), "danger")
    else:
        flash("Username updated successfully!", "success")
    return redirect(url_for("auth.settings"))


@bp.post("/settings/password")
@login_required
def update_password():
    form = PasswordForm.from_mapping(form_data())
    if not form.validate():
        flash(form.first_error, "danger")
        return redirect(url_for("auth.settings"))
    try:
        auth_service.update_password(
            user_id=current_user_id(),
            new_password=form.new_password,
            confirm_password=form.confirm_password,
            session_factory=get_session_factory(),
        )
    except ValueError as exc:
        flash(str(exc), "danger")
    else:
        flash("Password updated successfully!", "success")
    return redirect(url_for("auth.settings"))
