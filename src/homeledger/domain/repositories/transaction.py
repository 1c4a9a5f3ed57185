"""Transaction repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, runtime_checkable

from ...models.transaction import Transaction


@runtime_checkable
class TransactionRepository(Protocol):
    """Repository for managing transaction entities."""

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        ...

    def list_all(self, *, user_id: int, limit: int | None = None, offset: int = 0) -> list[Transaction]:
        """List transactions newest first."""
        ...

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
        """Search with optional filters."""
        ...

    def list_by_debt(self, debt_id: int, *, user_id: int) -> list[Transaction]:
        """Transactions linked to a debt."""
        ...

    def count(self, *, user_id: int) -> int:
        ...
