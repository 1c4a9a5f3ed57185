"""Tests for application context wiring."""

from __future__ import annotations

import pytest

from homeledger import config as config_module
from homeledger.context import create_app_context
from homeledger.services import registries


@pytest.fixture
def app_context(tmp_path, monkeypatch):
    monkeypatch.setenv("HOMELEDGER_DATA_DIR", str(tmp_path))
    ctx = create_app_context(config_module.TestConfig())
    yield ctx
    ctx.engine.dispose()


def test_context_wires_repositories_to_one_database(app_context):
    user = registries.create_user(app_context.session_factory, username="budi")
    registries.create_account(
        app_context.session_factory, user_id=user.id, name="BCA", bank_name="BCA", initial_balance=10
    )

    assert [a.name for a in app_context.account_repo.list_all(user_id=user.id)] == ["BCA"]
    assert app_context.current_month.day == 1


def test_require_user_id(app_context):
    with pytest.raises(RuntimeError, match="No user selected"):
        app_context.require_user_id()

    app_context.current_user = registries.create_user(app_context.session_factory, username="siti")
    assert app_context.require_user_id() == app_context.current_user.id


def test_repositories_satisfy_domain_protocols(app_context):
    from homeledger.domain import repositories as contracts

    assert isinstance(app_context.account_repo, contracts.AccountRepository)
    assert isinstance(app_context.budget_repo, contracts.BudgetRepository)
    assert isinstance(app_context.category_repo, contracts.CategoryRepository)
    assert isinstance(app_context.debt_repo, contracts.DebtRepository)
    assert isinstance(app_context.savings_repo, contracts.SavingsGoalRepository)
    assert isinstance(app_context.transaction_repo, contracts.TransactionRepository)
