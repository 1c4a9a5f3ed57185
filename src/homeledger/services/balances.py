"""Account balance derivation.

An account's ``current_balance`` is a cache of
``initial_balance + sum(signed amounts of every transaction touching it)``.
The sum is order-independent, so any subset of accounts can be re-derived at
any time from the rows that currently exist.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol

from sqlalchemy import or_
from sqlmodel import Session, select

from ..logging_config import get_logger
from ..models.account import Account
from ..models.transaction import Transaction

logger = get_logger(__name__)


class LedgerRow(Protocol):
    """Fields balance derivation needs from a transaction-like object."""

    type: str
    amount: float
    account_id: int
    destination_account_id: Optional[int]


def signed_amount(txn: LedgerRow, account_id: int) -> float:
    """Return the effect of *txn* on the balance of *account_id*."""

    amount = float(txn.amount or 0.0)
    if txn.type == "transfer":
        effect = 0.0
        if txn.account_id == account_id:
            effect -= amount
        if txn.destination_account_id == account_id:
            effect += amount
        return effect
    if txn.account_id != account_id:
        return 0.0
    if txn.type == "income":
        return amount
    # expense, including debt payments stored as expenses
    return -amount


def derive_balance(initial_balance: float, transactions: Iterable[LedgerRow], account_id: int) -> float:
    """Pure re-derivation of an account balance."""

    total = float(initial_balance or 0.0)
    for txn in transactions:
        total += signed_amount(txn, account_id)
    return round(total, 2)


def accounts_touched(*transactions: Optional[LedgerRow]) -> set[int]:
    """Return every account id referenced by the given transactions."""

    ids: set[int] = set()
    for txn in transactions:
        if txn is None:
            continue
        if txn.account_id is not None:
            ids.add(txn.account_id)
        if txn.destination_account_id is not None:
            ids.add(txn.destination_account_id)
    return ids


def recompute_balances(
    session: Session, *, user_id: int, account_ids: Optional[Iterable[int]] = None
) -> dict[int, float]:
    """Re-derive ``current_balance`` for the user's accounts inside *session*.

    When ``account_ids`` is None every account of the user is recomputed. The
    caller owns the transaction; nothing is committed here.
    """

    statement = select(Account).where(Account.user_id == user_id)
    ids = None if account_ids is None else sorted(set(account_ids))
    if ids is not None:
        if not ids:
            return {}
        statement = statement.where(Account.id.in_(ids))  # type: ignore[union-attr]
    accounts = list(session.exec(statement).all())
    if not accounts:
        return {}

    account_keys = [acc.id for acc in accounts]
    session.flush()
    txns = list(
        session.exec(
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .where(
                or_(
                    Transaction.account_id.in_(account_keys),  # type: ignore[union-attr]
                    Transaction.destination_account_id.in_(account_keys),  # type: ignore[union-attr]
                )
            )
        ).all()
    )

    now = datetime.now(timezone.utc)
    result: dict[int, float] = {}
    for account in accounts:
        balance = derive_balance(account.initial_balance, txns, account.id)
        if balance != account.current_balance:
            logger.debug(
                "Balance re-derived",
                extra={
                    "user_id": user_id,
                    "account_id": account.id,
                    "old_balance": account.current_balance,
                    "new_balance": balance,
                },
            )
        account.current_balance = balance
        account.updated_at = now
        session.add(account)
        result[account.id] = balance
    return result
