"""SQLModel implementation of the monthly budget repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import select

from ...models.budget import MonthlyBudget
from ..database import SessionFactory


class SQLModelBudgetRepository:
    """SQLModel-based monthly budget repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, budget_id: int, *, user_id: int) -> Optional[MonthlyBudget]:
        """Retrieve a budget by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(MonthlyBudget).where(
                    MonthlyBudget.id == budget_id, MonthlyBudget.user_id == user_id
                )
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def get_for_category(
        self, category_id: int, month: int, year: int, *, user_id: int
    ) -> Optional[MonthlyBudget]:
        """Return the budget row for one (category, month, year)."""
        with self.session_factory() as session:
            obj = session.exec(
                select(MonthlyBudget)
                .where(MonthlyBudget.user_id == user_id)
                .where(MonthlyBudget.category_id == category_id)
                .where(MonthlyBudget.month == month)
                .where(MonthlyBudget.year == year)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_for_month(self, month: int, year: int, *, user_id: int) -> list[MonthlyBudget]:
        """List budgets for a calendar month."""
        with self.session_factory() as session:
            statement = (
                select(MonthlyBudget)
                .where(MonthlyBudget.user_id == user_id)
                .where(MonthlyBudget.month == month)
                .where(MonthlyBudget.year == year)
                .order_by(MonthlyBudget.category_id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_all(self, *, user_id: int) -> list[MonthlyBudget]:
        """List every budget row, most recent period first."""
        with self.session_factory() as session:
            statement = (
                select(MonthlyBudget)
                .where(MonthlyBudget.user_id == user_id)
                .order_by(
                    MonthlyBudget.year.desc(),  # type: ignore
                    MonthlyBudget.month.desc(),  # type: ignore
                    MonthlyBudget.category_id,
                )
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def upsert(
        self, *, category_id: int, month: int, year: int, expected_amount: float, user_id: int
    ) -> MonthlyBudget:
        """Insert or replace the budget keyed on (user, category, month, year)."""
        with self.session_factory() as session:
            existing = session.exec(
                select(MonthlyBudget)
                .where(MonthlyBudget.user_id == user_id)
                .where(MonthlyBudget.category_id == category_id)
                .where(MonthlyBudget.month == month)
                .where(MonthlyBudget.year == year)
            ).first()

            if existing:
                existing.expected_amount = expected_amount
                existing.updated_at = datetime.now(timezone.utc)
                row = existing
            else:
                row = MonthlyBudget(
                    user_id=user_id,
                    category_id=category_id,
                    month=month,
                    year=year,
                    expected_amount=expected_amount,
                )
            session.add(row)
            session.commit()
            session.refresh(row)
            session.expunge(row)
            return row

    def delete(self, budget_id: int, *, user_id: int) -> None:
        """Delete a budget by ID."""
        with self.session_factory() as session:
            budget = session.exec(
                select(MonthlyBudget).where(
                    MonthlyBudget.id == budget_id, MonthlyBudget.user_id == user_id
                )
            ).first()
            if budget:
                session.delete(budget)
                session.commit()

    def count_for_category(self, category_id: int, *, user_id: int) -> int:
        """Number of budget rows for a category."""
        with self.session_factory() as session:
            rows = session.exec(
                select(MonthlyBudget.id)
                .where(MonthlyBudget.user_id == user_id)
                .where(MonthlyBudget.category_id == category_id)
            ).all()
            return len(rows)
