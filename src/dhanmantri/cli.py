"""Flask CLI commands for Dhan Mantri."""

from __future__ import annotations

from datetime import date

import click


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("dhanmantri-create-user")
    @click.option("--email", required=True, help="Login email address")
    @click.option("--username", required=True, help="Display name")
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    def dhanmantri_create_user(email: str, username: str, password: str) -> None:
        """Create an account without going through the sign-up page."""

        from .extensions import get_session_factory
        from .services.auth import create_user

        try:
            user = create_user(
                email=email,
                username=username,
                password=password,
                session_factory=get_session_factory(),
            )
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(f"Created user #{user.id} ({user.email})")

    @app.cli.command("dhanmantri-due")
    @click.option("--email", required=True, help="Account whose subscriptions to check")
    def dhanmantri_due(email: str) -> None:
        """List subscriptions billing within the next week."""

        from .extensions import get_session_factory
        from .infra.repositories.subscription import SQLModelSubscriptionRepository
        from .services.auth import get_user_by_email
        from .services.subscriptions import notification_summary

        session_factory = get_session_factory()
        user = get_user_by_email(email, session_factory=session_factory)
        if user is None:
            raise click.ClickException(f"No user with email {email}")

        repo = SQLModelSubscriptionRepository(session_factory)
        notice = notification_summary(repo.list_all(user_id=user.id), today=date.today())
        if not notice.count:
            click.echo("No subscriptions due in the next week.")
            return
        symbol = app.config["DHANMANTRI_CONFIG"].CURRENCY_SYMBOL
        click.echo(notice.message)
        for sub in notice.subscriptions:
            click.echo(f"  {sub.billing_date.isoformat()}  {sub.name}  {symbol}{sub.amount:,.2f}")
        click.echo(f"Total: {symbol}{notice.total_amount:,.2f}")
