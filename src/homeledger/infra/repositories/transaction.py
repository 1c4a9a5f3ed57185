"""SQLModel implementation of Transaction repository.

Read side only. Ledger writes go through ``services.ledger_service`` so that the
row change and the balance re-derivation share one database transaction.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import aliased
from sqlmodel import Session, select

from ...domain.views import TransactionView
from ...models.account import Account
from ...models.category import Category
from ...models.debt import Debt
from ...models.transaction import Transaction
from ..database import SessionFactory


def _apply_filters(
    statement,
    *,
    user_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    account_id: Optional[int] = None,
    category_id: Optional[int] = None,
    txn_type: Optional[str] = None,
    text: Optional[str] = None,
):
    statement = statement.where(Transaction.user_id == user_id)
    if start_date:
        statement = statement.where(Transaction.transaction_date >= start_date)
    if end_date:
        statement = statement.where(Transaction.transaction_date <= end_date)
    if account_id:
        statement = statement.where(
            or_(
                Transaction.account_id == account_id,
                Transaction.destination_account_id == account_id,
            )
        )
    if category_id:
        statement = statement.where(Transaction.category_id == category_id)
    if txn_type == "debt_payment":
        statement = statement.where(Transaction.debt_id.is_not(None))  # type: ignore[union-attr]
    elif txn_type:
        statement = statement.where(Transaction.type == txn_type)
    if text:
        statement = statement.where(Transaction.description.contains(text))  # type: ignore
    return statement


def _newest_first(statement):
    return statement.order_by(
        Transaction.transaction_date.desc(),  # type: ignore
        Transaction.id.desc(),  # type: ignore
    )


class SQLModelTransactionRepository:
    """SQLModel-based transaction repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Transaction)
                .where(Transaction.id == transaction_id)
                .where(Transaction.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(
        self, *, user_id: int, limit: int | None = None, offset: int = 0
    ) -> list[Transaction]:
        """List transactions newest first with optional pagination."""
        with self.session_factory() as session:
            statement = _newest_first(select(Transaction).where(Transaction.user_id == user_id))
            if offset:
                statement = statement.offset(offset)
            if limit is not None:
                statement = statement.limit(limit)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def search(
        self,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        txn_type: Optional[str] = None,
        text: Optional[str] = None,
    ) -> list[Transaction]:
        """Search with optional filters; ``account_id`` matches source or destination."""
        with self.session_factory() as session:
            statement = _apply_filters(
                select(Transaction),
                user_id=user_id,
                start_date=start_date,
                end_date=end_date,
                account_id=account_id,
                category_id=category_id,
                txn_type=txn_type,
                text=text,
            )
            rows = list(session.exec(_newest_first(statement)).all())
            session.expunge_all()
            return rows

    def list_views(
        self,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        txn_type: Optional[str] = None,
        text: Optional[str] = None,
    ) -> list[TransactionView]:
        """Search and join category, account and debt display names."""
        with self.session_factory() as session:
            return fetch_views(
                session,
                user_id=user_id,
                start_date=start_date,
                end_date=end_date,
                account_id=account_id,
                category_id=category_id,
                txn_type=txn_type,
                text=text,
            )

    def list_by_debt(self, debt_id: int, *, user_id: int) -> list[Transaction]:
        """List transactions linked to a debt, newest first."""
        with self.session_factory() as session:
            statement = _newest_first(
                select(Transaction)
                .where(Transaction.user_id == user_id)
                .where(Transaction.debt_id == debt_id)
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def count(self, *, user_id: int) -> int:
        """Number of transactions owned by the user."""
        with self.session_factory() as session:
            return int(
                session.exec(
                    select(func.count()).select_from(Transaction).where(Transaction.user_id == user_id)
                ).one()
            )

    def count_for_category(self, category_id: int, *, user_id: int) -> int:
        """Number of transactions filed under a category."""
        with self.session_factory() as session:
            return int(
                session.exec(
                    select(func.count())
                    .select_from(Transaction)
                    .where(Transaction.user_id == user_id)
                    .where(Transaction.category_id == category_id)
                ).one()
            )

    def count_for_account(self, account_id: int, *, user_id: int) -> int:
        """Number of transactions using an account as source or destination."""
        with self.session_factory() as session:
            return int(
                session.exec(
                    select(func.count())
                    .select_from(Transaction)
                    .where(Transaction.user_id == user_id)
                    .where(
                        or_(
                            Transaction.account_id == account_id,
                            Transaction.destination_account_id == account_id,
                        )
                    )
                ).one()
            )


def fetch_views(session: Session, *, user_id: int, **filters) -> list[TransactionView]:
    """Run a filtered transaction query joining display names within *session*."""

    destination = aliased(Account)
    statement = (
        select(
            Transaction,
            Category.name,
            Category.type,
            Account.name,
            destination.name,
            Debt.creditor_name,
        )
        .join(Category, Category.id == Transaction.category_id, isouter=True)
        .join(Account, Account.id == Transaction.account_id, isouter=True)
        .join(destination, destination.id == Transaction.destination_account_id, isouter=True)
        .join(Debt, Debt.id == Transaction.debt_id, isouter=True)
    )
    statement = _newest_first(_apply_filters(statement, user_id=user_id, **filters))

    views: list[TransactionView] = []
    for txn, cat_name, cat_type, account_name, dest_name, creditor in session.exec(statement).all():
        views.append(
            TransactionView(
                id=txn.id,
                type=txn.type,
                amount=txn.amount,
                transaction_date=txn.transaction_date,
                account_id=txn.account_id,
                category_id=txn.category_id,
                description=txn.description,
                destination_account_id=txn.destination_account_id,
                debt_id=txn.debt_id,
                category_name=cat_name,
                category_type=cat_type,
                account_name=account_name,
                destination_account_name=dest_name,
                debt_creditor=creditor,
            )
        )
    return views
