"""Monthly budget repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ...models.budget import MonthlyBudget


@runtime_checkable
class BudgetRepository(Protocol):
    """Repository for per-category monthly budgets."""

    def get_for_category(
        self, category_id: int, month: int, year: int, *, user_id: int
    ) -> Optional[MonthlyBudget]:
        """Return the budget row for one (category, month, year)."""
        ...

    def list_for_month(self, month: int, year: int, *, user_id: int) -> list[MonthlyBudget]:
        ...

    def list_all(self, *, user_id: int) -> list[MonthlyBudget]:
        ...

    def upsert(
        self, *, category_id: int, month: int, year: int, expected_amount: float, user_id: int
    ) -> MonthlyBudget:
        """Insert or replace the budget keyed on (user, category, month, year)."""
        ...

    def delete(self, budget_id: int, *, user_id: int) -> None:
        ...
