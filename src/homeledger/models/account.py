"""Bank account model."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(SQLModel, table=True):
    """A bank account whose current balance is derived from the ledger."""

    __tablename__: ClassVar[str] = "account"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128)
    bank_name: str = Field(nullable=False, max_length=128)
    account_number: Optional[str] = Field(default=None, max_length=64)
    initial_balance: float = Field(default=0.0, nullable=False)
    # Cached value; recomputed from initial_balance + transactions on every ledger write.
    current_balance: float = Field(default=0.0, nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)
