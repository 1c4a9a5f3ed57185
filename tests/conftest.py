"""Pytest configuration and shared fixtures for HomeLedger tests.

This module provides database fixtures and test data factories for testing domain
logic, repositories, and services without touching the real application database.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import date
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from homeledger.config import BaseConfig
from homeledger.infra.database import create_session_factory
from homeledger.logging_config import setup_logging
from homeledger.models import (
    Account,
    Category,
    Debt,
    SavingsGoal,
    Transaction,
    User,
)

# =============================================================================
# Logging Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def structured_logging(tmp_path_factory, monkeypatch):
    """Run every test with the package logger configured as the CLI configures it.

    Services then go through the JSON formatter and ``Logger.makeRecord`` at
    DEBUG, so a bad ``extra=`` key fails the test that triggers it.

    Yields:
        Path: the JSON log file
    """
    data_dir = tmp_path_factory.mktemp("logging")
    with monkeypatch.context() as env:
        env.setenv("HOMELEDGER_DATA_DIR", str(data_dir))
        config = BaseConfig()
    config.DEV_MODE = False
    config.LOG_LEVEL = "DEBUG"
    logger = setup_logging(config)

    yield data_dir / "logs" / "homeledger.log"

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to the test database
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
    """Transactional session scopes, the same factory the application uses."""

    return create_session_factory(db_engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """A plain session for arranging and inspecting rows directly."""

    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    finally:
        session.close()


# =============================================================================
# Test Data Factories
# =============================================================================


def _persist(session_factory, row):
    with session_factory() as session:
        session.add(row)
        session.flush()
        session.refresh(row)
        session.expunge(row)
    return row


@pytest.fixture
def user(session_factory) -> User:
    """Default owner for scoped data."""

    return _persist(session_factory, User(username="tester", display_name="Tester"))


@pytest.fixture
def other_user(session_factory) -> User:
    """A second owner, for isolation checks."""

    return _persist(session_factory, User(username="intruder"))


@pytest.fixture
def category_factory(session_factory, user):
    """Factory for creating test categories."""

    def _create_category(
        name: str = "Test Category",
        category_type: str = "expense",
        color: str = "#FF5733",
        owner: User | None = None,
    ) -> Category:
        owner = owner or user
        return _persist(
            session_factory,
            Category(user_id=owner.id, name=name, type=category_type, color=color),
        )

    return _create_category


@pytest.fixture
def account_factory(session_factory, user):
    """Factory for creating test accounts; balance starts at the initial balance."""

    def _create_account(
        name: str = "Test Account",
        initial_balance: float = 0.0,
        bank_name: str = "Bank Test",
        owner: User | None = None,
    ) -> Account:
        owner = owner or user
        return _persist(
            session_factory,
            Account(
                user_id=owner.id,
                name=name,
                bank_name=bank_name,
                initial_balance=initial_balance,
                current_balance=initial_balance,
            ),
        )

    return _create_account


@pytest.fixture
def debt_factory(session_factory, user):
    """Factory for creating test debts."""

    def _create_debt(
        creditor_name: str = "Bank Kredit",
        total_amount: float = 1_000_000.0,
        remaining_amount: float | None = None,
        monthly_payment: float | None = 100_000.0,
        owner: User | None = None,
    ) -> Debt:
        owner = owner or user
        remaining = total_amount if remaining_amount is None else remaining_amount
        return _persist(
            session_factory,
            Debt(
                user_id=owner.id,
                creditor_name=creditor_name,
                total_amount=total_amount,
                remaining_amount=remaining,
                opening_paid=total_amount - remaining,
                monthly_payment=monthly_payment,
                is_paid_off=remaining <= 0,
            ),
        )

    return _create_debt


@pytest.fixture
def goal_factory(session_factory, user):
    """Factory for creating test savings goals."""

    def _create_goal(
        category: Category,
        name: str = "Dana Darurat",
        target_amount: float = 10_000_000.0,
        current_amount: float = 0.0,
        owner: User | None = None,
    ) -> SavingsGoal:
        owner = owner or user
        return _persist(
            session_factory,
            SavingsGoal(
                user_id=owner.id,
                name=name,
                target_amount=target_amount,
                current_amount=current_amount,
                category_id=category.id,
                is_achieved=current_amount >= target_amount,
            ),
        )

    return _create_goal


@pytest.fixture
def transaction_factory(session_factory, user):
    """Factory inserting raw transaction rows, bypassing the ledger service.

    Balances are not re-derived; use it for read-side and reporting tests.
    """

    def _create_transaction(
        *,
        account: Account,
        category: Category,
        amount: float = 50_000.0,
        txn_type: str = "expense",
        transaction_date: date = date(2024, 3, 15),
        description: str | None = "Test transaction",
        destination: Account | None = None,
        debt: Debt | None = None,
        owner: User | None = None,
    ) -> Transaction:
        owner = owner or user
        return _persist(
            session_factory,
            Transaction(
                user_id=owner.id,
                description=description,
                amount=amount,
                type=txn_type,
                transaction_date=transaction_date,
                account_id=account.id,
                destination_account_id=destination.id if destination else None,
                category_id=category.id,
                debt_id=debt.id if debt else None,
            ),
        )

    return _create_transaction
