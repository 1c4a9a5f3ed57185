"""Debt and creditor obligations."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from .transaction import Transaction


class Debt(SQLModel, table=True):
    """An amount owed to a creditor, paid down by linked ledger transactions."""

    __tablename__: ClassVar[str] = "debt"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    creditor_name: str = Field(nullable=False, max_length=128, index=True)
    total_amount: float = Field(nullable=False)
    remaining_amount: float = Field(nullable=False)
    # Amount already repaid before the debt was recorded (total - remaining at creation).
    opening_paid: float = Field(default=0.0, nullable=False)
    interest_rate: float = Field(default=0.0, nullable=False)
    monthly_payment: Optional[float] = Field(default=None)
    due_date: Optional[date] = Field(default=None)
    is_paid_off: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )

    transactions: list["Transaction"] = Relationship(
        back_populates="debt",
        sa_relationship=relationship("Transaction", back_populates="debt"),
    )
