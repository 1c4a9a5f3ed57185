"""Read-only projections joining display names onto stored rows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True, slots=True)
class TransactionView:
    """A transaction with the names of the rows it references.

    Names are looked up at read time and are never authoritative.
    """

    id: int
    type: str
    amount: float
    transaction_date: date
    account_id: int
    category_id: int
    description: Optional[str] = None
    destination_account_id: Optional[int] = None
    debt_id: Optional[int] = None
    category_name: Optional[str] = None
    category_type: Optional[str] = None
    account_name: Optional[str] = None
    destination_account_name: Optional[str] = None
    debt_creditor: Optional[str] = None

    @property
    def is_debt_payment(self) -> bool:
        return self.debt_id is not None and self.type == "expense"


@dataclass(frozen=True, slots=True)
class SavingsGoalView:
    """A savings goal with its category name."""

    id: int
    name: str
    target_amount: float
    current_amount: float
    category_id: int
    is_achieved: bool
    target_date: Optional[date] = None
    category_name: Optional[str] = None
