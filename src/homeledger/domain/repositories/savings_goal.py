"""Savings goal repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ...models.savings_goal import SavingsGoal


@runtime_checkable
class SavingsGoalRepository(Protocol):
    """Repository for managing savings goals."""

    def get_by_id(self, goal_id: int, *, user_id: int) -> Optional[SavingsGoal]:
        ...

    def list_all(self, *, user_id: int) -> list[SavingsGoal]:
        ...

    def create(self, goal: SavingsGoal, *, user_id: int) -> SavingsGoal:
        ...

    def update(self, goal: SavingsGoal, *, user_id: int) -> SavingsGoal:
        ...

    def delete(self, goal_id: int, *, user_id: int) -> None:
        ...
