"""SQLModel implementation of Account repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import select

from ...models.account import Account
from ..database import SessionFactory


class SQLModelAccountRepository:
    """SQLModel-based account repository implementation.

    ``current_balance`` is owned by the ledger; writes here never recompute it.
    """

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, account_id: int, *, user_id: int) -> Optional[Account]:
        """Retrieve an account by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Account).where(Account.id == account_id, Account.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int, active_only: bool = False) -> list[Account]:
        """List accounts, newest first."""
        with self.session_factory() as session:
            statement = select(Account).where(Account.user_id == user_id)
            if active_only:
                statement = statement.where(Account.is_active == True)  # noqa: E712
            statement = statement.order_by(Account.created_at.desc(), Account.id.desc())  # type: ignore
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, account: Account, *, user_id: int) -> Account:
        """Create a new account; the balance starts at the initial balance."""
        with self.session_factory() as session:
            account.user_id = user_id
            account.current_balance = float(account.initial_balance or 0.0)
            session.add(account)
            session.commit()
            session.refresh(account)
            session.expunge(account)
            return account

    def update(self, account: Account, *, user_id: int) -> Account:
        """Update an existing account."""
        with self.session_factory() as session:
            account.user_id = user_id
            account.updated_at = datetime.now(timezone.utc)
            merged = session.merge(account)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, account_id: int, *, user_id: int) -> None:
        """Delete an account by ID."""
        with self.session_factory() as session:
            account = session.exec(
                select(Account).where(Account.id == account_id, Account.user_id == user_id)
            ).first()
            if account:
                session.delete(account)
                session.commit()

    def total_balance(self, *, user_id: int) -> float:
        """Sum of current balances over active accounts."""
        return round(
            sum(acc.current_balance for acc in self.list_all(user_id=user_id, active_only=True)), 2
        )
