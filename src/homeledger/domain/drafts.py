"""Validated transaction drafts.

A draft is what a caller asked for after field-level validation and before any
category resolution or persistence. Each variant carries exactly the fields its
transaction type requires, so illegal combinations (a transfer with a debt, an
income without a category) cannot be constructed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union


@dataclass(frozen=True, slots=True)
class IncomeDraft:
    description: str
    amount: float
    transaction_date: date
    account_id: int
    category_id: int

    kind = "income"


@dataclass(frozen=True, slots=True)
class ExpenseDraft:
    description: str
    amount: float
    transaction_date: date
    account_id: int
    category_id: int
    # Expenses tagged "Bayar Utang" by hand may still point at the debt they repay.
    debt_id: Optional[int] = None

    kind = "expense"


@dataclass(frozen=True, slots=True)
class TransferDraft:
    amount: float
    transaction_date: date
    account_id: int
    destination_account_id: int
    description: Optional[str] = None

    kind = "transfer"


@dataclass(frozen=True, slots=True)
class DebtPaymentDraft:
    amount: float
    transaction_date: date
    account_id: int
    debt_id: int
    description: Optional[str] = None

    kind = "debt_payment"


TransactionDraft = Union[IncomeDraft, ExpenseDraft, TransferDraft, DebtPaymentDraft]

__all__ = [
    "DebtPaymentDraft",
    "ExpenseDraft",
    "IncomeDraft",
    "TransactionDraft",
    "TransferDraft",
]
