"""Debt repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ...models.debt import Debt


@runtime_checkable
class DebtRepository(Protocol):
    """Repository for managing debt entities."""

    def get_by_id(self, debt_id: int, *, user_id: int) -> Optional[Debt]:
        ...

    def list_all(self, *, user_id: int) -> list[Debt]:
        ...

    def list_outstanding(self, *, user_id: int) -> list[Debt]:
        """Debts that are not paid off."""
        ...

    def create(self, debt: Debt, *, user_id: int) -> Debt:
        ...

    def update(self, debt: Debt, *, user_id: int) -> Debt:
        ...

    def delete(self, debt_id: int, *, user_id: int) -> None:
        ...
