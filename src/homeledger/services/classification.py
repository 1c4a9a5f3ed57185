"""Resolve a validated draft into the fields of a stored transaction row."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Sequence

from ..domain.drafts import (
    DebtPaymentDraft,
    ExpenseDraft,
    IncomeDraft,
    TransactionDraft,
    TransferDraft,
)
from ..errors import ValidationFailed
from ..models.category import Category
from ..models.transaction import Transaction

_COLUMNS = (
    "type",
    "amount",
    "transaction_date",
    "account_id",
    "category_id",
    "description",
    "destination_account_id",
    "debt_id",
)


@dataclass(frozen=True, slots=True)
class ResolvedTransaction:
    """Column values ready to be written to the ``transaction`` table."""

    type: str
    amount: float
    transaction_date: date
    account_id: int
    category_id: int
    description: Optional[str] = None
    destination_account_id: Optional[int] = None
    debt_id: Optional[int] = None

    def as_columns(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in _COLUMNS}

    def apply_to(self, txn: Transaction) -> Transaction:
        for name, value in self.as_columns().items():
            setattr(txn, name, value)
        return txn


def resolve_transfer_category(
    categories: Sequence[Category], name: str = "Transfer"
) -> Optional[Category]:
    """First category literally named *name*, else the first category of any type."""

    for category in categories:
        if category.name == name:
            return category
    return categories[0] if categories else None


def resolve_debt_payment_category(
    categories: Sequence[Category], name: str = "Pembayaran Utang"
) -> Optional[Category]:
    """Expense category named *name*, else the first expense category."""

    expenses = [c for c in categories if c.type == "expense"]
    for category in expenses:
        if category.name == name:
            return category
    return expenses[0] if expenses else None


def classify(
    draft: TransactionDraft,
    *,
    categories: Sequence[Category],
    transfer_category_name: str = "Transfer",
    debt_category_name: str = "Pembayaran Utang",
) -> ResolvedTransaction:
    """Map *draft* onto stored columns using the user's *categories*.

    ``categories`` must be ordered by id. Raises ``ValidationFailed`` when the
    category is missing, belongs to another type, or no category can be
    resolved for a transfer or debt payment.
    """

    if isinstance(draft, (IncomeDraft, ExpenseDraft)):
        category = next((c for c in categories if c.id == draft.category_id), None)
        if category is None:
            raise ValidationFailed({"category_id": ["Category not found."]})
        if category.type != draft.kind:
            raise ValidationFailed(
                {
                    "category_id": [
                        f"Category '{category.name}' is a {category.type} category, "
                        f"not {draft.kind}."
                    ]
                }
            )
        return ResolvedTransaction(
            type=draft.kind,
            amount=float(draft.amount),
            transaction_date=draft.transaction_date,
            account_id=draft.account_id,
            category_id=category.id,  # type: ignore[arg-type]
            description=draft.description,
            debt_id=draft.debt_id if isinstance(draft, ExpenseDraft) else None,
        )

    if isinstance(draft, TransferDraft):
        if draft.account_id == draft.destination_account_id:
            raise ValidationFailed(
                {"destination_account_id": ["Destination account must differ from the source account."]}
            )
        category = resolve_transfer_category(categories, transfer_category_name)
        if category is None:
            raise ValidationFailed({"category_id": ["No category available for transfers."]})
        return ResolvedTransaction(
            type="transfer",
            amount=float(draft.amount),
            transaction_date=draft.transaction_date,
            account_id=draft.account_id,
            category_id=category.id,  # type: ignore[arg-type]
            description=draft.description,
            destination_account_id=draft.destination_account_id,
        )

    if isinstance(draft, DebtPaymentDraft):
        category = resolve_debt_payment_category(categories, debt_category_name)
        if category is None:
            raise ValidationFailed(
                {"category_id": ["Create an expense category before recording debt payments."]}
            )
        return ResolvedTransaction(
            type="expense",
            amount=float(draft.amount),
            transaction_date=draft.transaction_date,
            account_id=draft.account_id,
            category_id=category.id,  # type: ignore[arg-type]
            description=draft.description,
            debt_id=draft.debt_id,
        )

    raise ValidationFailed({"type": [f"Unsupported draft {type(draft).__name__}."]})
