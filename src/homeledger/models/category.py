"""Ledger category definitions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from .transaction import Transaction

CATEGORY_TYPES = ("income", "expense", "savings", "debt")
DEFAULT_COLOR = "#3B82F6"


class Category(SQLModel, table=True):
    """Named, coloured tag attached to transactions, budgets and savings goals."""

    __tablename__: ClassVar[str] = "category"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(index=True, nullable=False, max_length=64)
    type: str = Field(default="expense", nullable=False, max_length=16)
    icon: Optional[str] = Field(default=None, max_length=64)
    color: str = Field(default=DEFAULT_COLOR, max_length=7)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )

    transactions: list["Transaction"] = Relationship(
        back_populates="category",
        sa_relationship=relationship("Transaction", back_populates="category"),
    )
