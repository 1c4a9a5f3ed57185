"""Account repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ...models.account import Account


@runtime_checkable
class AccountRepository(Protocol):
    """Repository for managing account entities."""

    def get_by_id(self, account_id: int, *, user_id: int) -> Optional[Account]:
        """Retrieve an account by ID."""
        ...

    def list_all(self, *, user_id: int, active_only: bool = False) -> list[Account]:
        """List accounts, newest first."""
        ...

    def create(self, account: Account, *, user_id: int) -> Account:
        """Create a new account with current_balance seeded from initial_balance."""
        ...

    def update(self, account: Account, *, user_id: int) -> Account:
        """Update an existing account."""
        ...

    def delete(self, account_id: int, *, user_id: int) -> None:
        """Delete an account by ID."""
        ...
