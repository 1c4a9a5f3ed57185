"""Domain types and repository contracts."""

from .drafts import (
    DebtPaymentDraft,
    ExpenseDraft,
    IncomeDraft,
    TransactionDraft,
    TransferDraft,
)

__all__ = [
    "DebtPaymentDraft",
    "ExpenseDraft",
    "IncomeDraft",
    "TransactionDraft",
    "TransferDraft",
]
