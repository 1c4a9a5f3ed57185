"""Ledger-specific helpers for filtering, summaries, and persistence.

Every write here opens exactly one session from the factory. The row change,
the balance re-derivation of each touched account and the re-derivation of
any linked debt commit together or not at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import delete
from sqlmodel import Session, select

from ..config import BaseConfig
from ..domain.drafts import DebtPaymentDraft, ExpenseDraft, TransactionDraft, TransferDraft
from ..domain.views import TransactionView
from ..errors import RecordNotFound, ValidationFailed
from ..infra.database import SessionFactory
from ..infra.repositories.transaction import SQLModelTransactionRepository
from ..logging_config import get_logger
from ..models.account import Account
from ..models.category import Category
from ..models.debt import Debt
from ..models.transaction import Transaction
from .balances import accounts_touched, recompute_balances
from .classification import ResolvedTransaction, classify
from .debts import sync_debts
from .transaction_form import parse_draft

logger = get_logger(__name__)


@dataclass
class LedgerFilters:
    """Filters applied to ledger listings."""

    user_id: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    account_id: Optional[int] = None
    category_id: Optional[int] = None
    text: Optional[str] = None
    txn_type: str = "all"  # income | expense | transfer | debt_payment | all


@dataclass
class Pagination:
    """Simple pagination parameters."""

    page: int = 1
    per_page: int = 25


def normalize_id_value(raw_value: Any) -> Optional[int]:
    """Return a nullable id, treating falsy/'all' as None."""

    if raw_value is None or raw_value == "":
        return None
    if isinstance(raw_value, int):
        return raw_value or None
    lowered = str(raw_value).strip().lower()
    if lowered in {"all", "none", "any"}:
        return None
    try:
        return int(lowered)
    except (TypeError, ValueError):
        return None


def filtered_transactions(
    repo: SQLModelTransactionRepository, filters: LedgerFilters
) -> list[TransactionView]:
    """Fetch transaction views newest first with the supplied filters."""

    return repo.list_views(
        user_id=filters.user_id,
        start_date=filters.start_date,
        end_date=filters.end_date,
        account_id=filters.account_id,
        category_id=filters.category_id,
        txn_type=None if filters.txn_type == "all" else filters.txn_type,
        text=filters.text,
    )


def paginate_transactions(
    txs: list[TransactionView], pagination: Pagination
) -> tuple[list[TransactionView], int]:
    """Return the current page of transactions and total count."""

    total = len(txs)
    page = max(1, pagination.page)
    per_page = max(1, pagination.per_page)
    start = (page - 1) * per_page
    end = start + per_page
    return txs[start:end], total


def compute_summary(transactions: Iterable[TransactionView]) -> dict[str, float]:
    """Compute income, expense, transfer and net totals for a listing."""

    income = expense = transfer = 0.0
    for txn in transactions:
        if txn.type == "income":
            income += txn.amount
        elif txn.type == "expense":
            expense += txn.amount
        elif txn.type == "transfer":
            transfer += txn.amount
    return {
        "income": round(income, 2),
        "expense": round(expense, 2),
        "transfer": round(transfer, 2),
        "net": round(income - expense, 2),
    }


# -- writes ---------------------------------------------------------------


def _owned(session: Session, model, record_id: Optional[int], user_id: int):
    if record_id is None:
        return None
    row = session.get(model, record_id)
    if row is None or row.user_id != user_id:
        return None
    return row


def _check_references(session: Session, draft: TransactionDraft, *, user_id: int) -> None:
    errors: dict[str, list[str]] = {}
    if _owned(session, Account, draft.account_id, user_id) is None:
        errors["account_id"] = ["Account not found."]
    if isinstance(draft, TransferDraft):
        if _owned(session, Account, draft.destination_account_id, user_id) is None:
            errors["destination_account_id"] = ["Destination account not found."]
    if isinstance(draft, (ExpenseDraft, DebtPaymentDraft)) and draft.debt_id is not None:
        if _owned(session, Debt, draft.debt_id, user_id) is None:
            errors["debt_id"] = ["Debt not found."]
    if errors:
        raise ValidationFailed(errors)


def _user_categories(session: Session, user_id: int) -> list[Category]:
    return list(
        session.exec(
            select(Category).where(Category.user_id == user_id).order_by(Category.id)  # type: ignore[arg-type]
        ).all()
    )


def _resolve(
    session: Session, draft: TransactionDraft, *, user_id: int, config: Optional[BaseConfig]
) -> ResolvedTransaction:
    """Validate references and classify *draft* inside the caller's session."""

    transfer_name = config.TRANSFER_CATEGORY_NAME if config else BaseConfig.TRANSFER_CATEGORY_NAME
    debt_name = config.DEBT_PAYMENT_CATEGORY_NAME if config else BaseConfig.DEBT_PAYMENT_CATEGORY_NAME

    _check_references(session, draft, user_id=user_id)
    categories = _user_categories(session, user_id)
    if isinstance(draft, TransferDraft) and not categories:
        placeholder = Category(user_id=user_id, name=transfer_name, type="expense")
        session.add(placeholder)
        session.flush()
        logger.info(
            "Transfer category created",
            extra={"user_id": user_id, "category_id": placeholder.id},
        )
        categories = [placeholder]
    return classify(
        draft,
        categories=categories,
        transfer_category_name=transfer_name,
        debt_category_name=debt_name,
    )


def _rederive(
    session: Session,
    *,
    user_id: int,
    account_ids: Iterable[int],
    debt_ids: Iterable[Optional[int]],
) -> None:
    recompute_balances(session, user_id=user_id, account_ids=account_ids)
    sync_debts(session, user_id=user_id, debt_ids=[d for d in debt_ids if d is not None])


def _load(session: Session, transaction_id: int, user_id: int) -> Transaction:
    txn = _owned(session, Transaction, transaction_id, user_id)
    if txn is None:
        raise RecordNotFound("Transaction", transaction_id)
    return txn


def create_transaction(
    session_factory: SessionFactory,
    draft: TransactionDraft,
    *,
    user_id: int,
    config: Optional[BaseConfig] = None,
) -> Transaction:
    """Persist *draft* and re-derive the balances it touches."""

    with session_factory() as session:
        resolved = _resolve(session, draft, user_id=user_id, config=config)
        txn = Transaction(user_id=user_id, **resolved.as_columns())
        session.add(txn)
        session.flush()
        _rederive(
            session,
            user_id=user_id,
            account_ids=accounts_touched(txn),
            debt_ids=[txn.debt_id],
        )
        session.flush()
        session.refresh(txn)
        session.expunge(txn)

    logger.info(
        "Transaction created",
        extra={
            "user_id": user_id,
            "transaction_id": txn.id,
            "type": draft.kind,
            "amount": txn.amount,
        },
    )
    return txn


def record_transaction(
    session_factory: SessionFactory,
    data: Mapping[str, Any],
    *,
    user_id: int,
    config: Optional[BaseConfig] = None,
) -> Transaction:
    """Validate raw input and create the transaction it describes."""

    return create_transaction(session_factory, parse_draft(data), user_id=user_id, config=config)


def update_transaction(
    session_factory: SessionFactory,
    transaction_id: int,
    draft: TransactionDraft,
    *,
    user_id: int,
    config: Optional[BaseConfig] = None,
) -> Transaction:
    """Replace a transaction's fields and re-derive old and new accounts and debts."""

    with session_factory() as session:
        txn = _load(session, transaction_id, user_id)
        previous_accounts = accounts_touched(txn)
        previous_debt = txn.debt_id

        resolved = _resolve(session, draft, user_id=user_id, config=config)
        resolved.apply_to(txn)
        txn.updated_at = datetime.now(timezone.utc)
        session.add(txn)
        session.flush()
        _rederive(
            session,
            user_id=user_id,
            account_ids=previous_accounts | accounts_touched(txn),
            debt_ids=[previous_debt, txn.debt_id],
        )
        session.flush()
        session.refresh(txn)
        session.expunge(txn)

    logger.info(
        "Transaction updated",
        extra={"user_id": user_id, "transaction_id": transaction_id, "type": draft.kind},
    )
    return txn


def delete_transaction(
    session_factory: SessionFactory, transaction_id: int, *, user_id: int
) -> None:
    """Remove a transaction and re-derive the accounts and debt it touched."""

    with session_factory() as session:
        txn = _load(session, transaction_id, user_id)
        touched = accounts_touched(txn)
        debt_id = txn.debt_id
        session.delete(txn)
        session.flush()
        _rederive(session, user_id=user_id, account_ids=touched, debt_ids=[debt_id])

    logger.info(
        "Transaction deleted", extra={"user_id": user_id, "transaction_id": transaction_id}
    )


def reset_transactions(session_factory: SessionFactory, *, user_id: int) -> int:
    """Delete every transaction of the user and restore accounts to their opening balance.

    Returns the number of deleted rows.
    """

    with session_factory() as session:
        result = session.execute(delete(Transaction).where(Transaction.user_id == user_id))
        deleted = int(result.rowcount or 0)
        recompute_balances(session, user_id=user_id)
        sync_debts(session, user_id=user_id)

    logger.warning("Transactions reset", extra={"user_id": user_id, "deleted": deleted})
    return deleted


def recompute_all_balances(session_factory: SessionFactory, *, user_id: int) -> dict[int, float]:
    """Repair every cached balance and debt remainder for the user."""

    with session_factory() as session:
        balances = recompute_balances(session, user_id=user_id)
        sync_debts(session, user_id=user_id)

    logger.info(
        "Balances recomputed", extra={"user_id": user_id, "accounts": len(balances)}
    )
    return balances
