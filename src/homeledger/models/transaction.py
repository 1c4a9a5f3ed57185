"""SQLModel definitions for ledger transactions."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover - import guard for circular dependency
    from .category import Category
    from .debt import Debt

# Types a caller may request. debt_payment is persisted as an expense linked to a debt.
TRANSACTION_TYPES = ("income", "expense", "transfer", "debt_payment")
STORED_TYPES = ("income", "expense", "transfer")


class Transaction(SQLModel, table=True):
    """A single ledger entry moving money into, out of, or between accounts."""

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    description: Optional[str] = Field(default=None, max_length=255)
    amount: float = Field(nullable=False, description="Always positive; direction comes from type")
    type: str = Field(nullable=False, max_length=16, index=True)
    transaction_date: date = Field(nullable=False, index=True)
    account_id: int = Field(foreign_key="account.id", nullable=False, index=True)
    destination_account_id: Optional[int] = Field(
        default=None, foreign_key="account.id", index=True
    )
    category_id: int = Field(foreign_key="category.id", nullable=False, index=True)
    debt_id: Optional[int] = Field(default=None, foreign_key="debt.id", index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )

    category: "Category" = Relationship(
        back_populates="transactions",
        sa_relationship=relationship("Category", back_populates="transactions"),
    )
    debt: "Debt | None" = Relationship(
        back_populates="transactions",
        sa_relationship=relationship("Debt", back_populates="transactions"),
    )
