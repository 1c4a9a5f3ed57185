"""SQLModel implementation of SavingsGoal repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import select

from ...domain.views import SavingsGoalView
from ...models.category import Category
from ...models.savings_goal import SavingsGoal
from ..database import SessionFactory


class SQLModelSavingsGoalRepository:
    """SQLModel-based savings goal repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, goal_id: int, *, user_id: int) -> Optional[SavingsGoal]:
        """Retrieve a savings goal by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(SavingsGoal).where(SavingsGoal.id == goal_id, SavingsGoal.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[SavingsGoal]:
        """List savings goals, newest first."""
        with self.session_factory() as session:
            statement = (
                select(SavingsGoal)
                .where(SavingsGoal.user_id == user_id)
                .order_by(SavingsGoal.created_at.desc(), SavingsGoal.id.desc())  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_views(self, *, user_id: int) -> list[SavingsGoalView]:
        """List savings goals joined with their category name."""
        with self.session_factory() as session:
            statement = (
                select(SavingsGoal, Category.name)
                .join(Category, Category.id == SavingsGoal.category_id, isouter=True)
                .where(SavingsGoal.user_id == user_id)
                .order_by(SavingsGoal.created_at.desc(), SavingsGoal.id.desc())  # type: ignore
            )
            return [
                SavingsGoalView(
                    id=goal.id,
                    name=goal.name,
                    target_amount=goal.target_amount,
                    current_amount=goal.current_amount,
                    category_id=goal.category_id,
                    is_achieved=goal.is_achieved,
                    target_date=goal.target_date,
                    category_name=category_name,
                )
                for goal, category_name in session.exec(statement).all()
            ]

    def create(self, goal: SavingsGoal, *, user_id: int) -> SavingsGoal:
        """Create a new savings goal."""
        with self.session_factory() as session:
            goal.user_id = user_id
            session.add(goal)
            session.commit()
            session.refresh(goal)
            session.expunge(goal)
            return goal

    def update(self, goal: SavingsGoal, *, user_id: int) -> SavingsGoal:
        """Update an existing savings goal."""
        with self.session_factory() as session:
            goal.user_id = user_id
            goal.updated_at = datetime.now(timezone.utc)
            merged = session.merge(goal)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, goal_id: int, *, user_id: int) -> None:
        """Delete a savings goal by ID."""
        with self.session_factory() as session:
            goal = session.exec(
                select(SavingsGoal).where(SavingsGoal.id == goal_id, SavingsGoal.user_id == user_id)
            ).first()
            if goal:
                session.delete(goal)
                session.commit()

    def count_for_category(self, category_id: int, *, user_id: int) -> int:
        """Number of goals filed under a category."""
        with self.session_factory() as session:
            rows = session.exec(
                select(SavingsGoal.id)
                .where(SavingsGoal.user_id == user_id)
                .where(SavingsGoal.category_id == category_id)
            ).all()
            return len(rows)
