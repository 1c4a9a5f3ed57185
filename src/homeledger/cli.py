"""Administrative click commands for HomeLedger."""

from __future__ import annotations

import json
from datetime import date, datetime

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .logging_config import setup_logging
from .services import ledger_service, registries, reports
from .services.operations import run_operation


def _context() -> AppContext:
    return click.get_current_context().find_object(AppContext)


def _require_user(ctx: AppContext, username: str) -> int:
    user = registries.get_user_by_username(ctx.session_factory, username)
    if user is None or user.id is None:
        raise click.ClickException(f"Unknown user '{username}'. Run create-user first.")
    ctx.current_user = user
    return user.id


def _unwrap(result):
    if not result.ok:
        raise click.ClickException(result.message)
    return result.value


def _parse_month(value: str) -> tuple[int, int]:
    try:
        parsed = datetime.strptime(value, "%Y-%m")
    except ValueError as exc:
        raise click.BadParameter("Use the YYYY-MM format.", param_hint="--month") from exc
    return parsed.year, parsed.month


user_option = click.option("--user", "username", required=True, help="Username owning the data")


@click.group()
@click.pass_context
def main(click_ctx: click.Context) -> None:
    """HomeLedger administration."""

    config = BaseConfig()
    setup_logging(config)
    click_ctx.obj = create_app_context(config)


@main.command("init-db")
def init_db() -> None:
    """Create the database schema."""

    ctx = _context()
    click.echo(f"Database ready: {ctx.config.DATABASE_URL}")


@main.command("create-user")
@click.argument("username")
@click.option("--display-name", default=None, help="Name shown in reports")
@click.option("--currency", default=None, help="ISO currency code (defaults to configuration)")
@click.option("--seed/--no-seed", default=True, show_default=True, help="Seed default categories")
def create_user(username: str, display_name: str | None, currency: str | None, seed: bool) -> None:
    """Create a user profile."""

    ctx = _context()
    user = _unwrap(
        run_operation(
            "create user",
            registries.create_user,
            ctx.session_factory,
            username=username,
            display_name=display_name,
            currency=currency or ctx.config.CURRENCY,
        )
    )
    click.echo(f"Created user '{user.username}' (id {user.id})")
    if seed:
        created = _unwrap(
            run_operation(
                "seed categories",
                registries.seed_default_categories,
                ctx.session_factory,
                user_id=user.id,
            )
        )
        click.echo(f"Seeded {len(created)} categories")


@main.command("seed-categories")
@user_option
def seed_categories(username: str) -> None:
    """Create the default categories the user does not have yet."""

    ctx = _context()
    user_id = _require_user(ctx, username)
    created = _unwrap(
        run_operation(
            "seed categories",
            registries.seed_default_categories,
            ctx.session_factory,
            user_id=user_id,
        )
    )
    click.echo(f"Seeded {len(created)} categories")


@main.command("reset-transactions")
@user_option
@click.confirmation_option(prompt="Delete every transaction for this user?")
def reset_transactions(username: str) -> None:
    """Delete all transactions and restore opening balances."""

    ctx = _context()
    user_id = _require_user(ctx, username)
    deleted = _unwrap(
        run_operation(
            "reset transactions",
            ledger_service.reset_transactions,
            ctx.session_factory,
            user_id=user_id,
        )
    )
    click.echo(f"Deleted {deleted} transactions")


@main.command("recompute-balances")
@user_option
def recompute_balances(username: str) -> None:
    """Re-derive every account balance from the ledger."""

    ctx = _context()
    user_id = _require_user(ctx, username)
    balances = _unwrap(
        run_operation(
            "recompute balances",
            ledger_service.recompute_all_balances,
            ctx.session_factory,
            user_id=user_id,
        )
    )
    names = {a.id: a.name for a in ctx.account_repo.list_all(user_id=user_id)}
    for account_id, balance in sorted(balances.items()):
        click.echo(f"{names.get(account_id, account_id)}: {balance:,.2f}")
    click.echo(f"Recomputed {len(balances)} accounts")


@main.command("monthly-report")
@user_option
@click.option("--month", "month_value", default=None, help="YYYY-MM (defaults to this month)")
def monthly_report(username: str, month_value: str | None) -> None:
    """Print the monthly report as JSON."""

    ctx = _context()
    user_id = _require_user(ctx, username)
    year, month = _parse_month(month_value) if month_value else (date.today().year, date.today().month)
    report = _unwrap(
        run_operation(
            "build monthly report",
            reports.build_monthly_report,
            ctx.session_factory,
            user_id=user_id,
            year=year,
            month=month,
        )
    )
    click.echo(json.dumps(reports.report_to_dict(report), default=str, indent=2))


@main.command("annual-report")
@user_option
@click.option("--year", type=int, default=None, help="Calendar year (defaults to this year)")
def annual_report(username: str, year: int | None) -> None:
    """Print the annual report as JSON."""

    ctx = _context()
    user_id = _require_user(ctx, username)
    report = _unwrap(
        run_operation(
            "build annual report",
            reports.build_annual_report,
            ctx.session_factory,
            user_id=user_id,
            year=year or date.today().year,
        )
    )
    click.echo(json.dumps(reports.report_to_dict(report), default=str, indent=2))


if __name__ == "__main__":  # pragma: no cover
    main()
