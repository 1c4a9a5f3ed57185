"""SQLModel implementation of Debt repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import select

from ...models.debt import Debt
from ..database import SessionFactory


class SQLModelDebtRepository:
    """SQLModel-based debt repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, debt_id: int, *, user_id: int) -> Optional[Debt]:
        """Retrieve a debt by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Debt).where(Debt.id == debt_id, Debt.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[Debt]:
        """List all debts, newest first."""
        with self.session_factory() as session:
            statement = (
                select(Debt)
                .where(Debt.user_id == user_id)
                .order_by(Debt.created_at.desc(), Debt.id.desc())  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_outstanding(self, *, user_id: int) -> list[Debt]:
        """List debts that are not paid off."""
        return [debt for debt in self.list_all(user_id=user_id) if not debt.is_paid_off]

    def create(self, debt: Debt, *, user_id: int) -> Debt:
        """Create a new debt."""
        with self.session_factory() as session:
            debt.user_id = user_id
            session.add(debt)
            session.commit()
            session.refresh(debt)
            session.expunge(debt)
            return debt

    def update(self, debt: Debt, *, user_id: int) -> Debt:
        """Update an existing debt."""
        with self.session_factory() as session:
            debt.user_id = user_id
            debt.updated_at = datetime.now(timezone.utc)
            merged = session.merge(debt)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, debt_id: int, *, user_id: int) -> None:
        """Delete a debt by ID."""
        with self.session_factory() as session:
            debt = session.exec(
                select(Debt).where(Debt.id == debt_id, Debt.user_id == user_id)
            ).first()
            if debt:
                session.delete(debt)
                session.commit()

    def get_total_outstanding(self, *, user_id: int) -> float:
        """Sum of remaining amounts over unpaid debts."""
        return round(sum(d.remaining_amount for d in self.list_outstanding(user_id=user_id)), 2)
