"""Tests for account balance derivation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlmodel import select

from homeledger.models import Account
from homeledger.services.balances import (
    accounts_touched,
    derive_balance,
    recompute_balances,
    signed_amount,
)


@dataclass
class Row:
    type: str
    amount: float
    account_id: int
    destination_account_id: Optional[int] = None


def test_signed_amount_by_type():
    assert signed_amount(Row("income", 100, 1), 1) == 100
    assert signed_amount(Row("expense", 40, 1), 1) == -40
    assert signed_amount(Row("expense", 40, 1), 2) == 0


def test_transfer_moves_money_between_accounts():
    transfer = Row("transfer", 100, 1, 2)

    assert signed_amount(transfer, 1) == -100
    assert signed_amount(transfer, 2) == 100
    assert signed_amount(transfer, 3) == 0


def test_derive_balance_is_order_independent():
    rows = [Row("income", 500_000, 1), Row("expense", 200_000, 1), Row("transfer", 50_000, 2, 1)]

    forward = derive_balance(1_000_000, rows, 1)
    backward = derive_balance(1_000_000, list(reversed(rows)), 1)

    assert forward == backward == 1_350_000


def test_derive_balance_rounds_to_cents():
    rows = [Row("income", 0.1, 1), Row("income", 0.2, 1)]

    assert derive_balance(0, rows, 1) == 0.3


def test_accounts_touched_collects_sources_and_destinations():
    assert accounts_touched(Row("transfer", 1, 1, 2), None, Row("income", 1, 5)) == {1, 2, 5}


def test_recompute_balances_repairs_stale_cache(
    session_factory, user, account_factory, category_factory, transaction_factory
):
    wallet = account_factory(name="Dompet", initial_balance=100_000)
    bank = account_factory(name="BCA", initial_balance=0)
    salary = category_factory(name="Gaji", category_type="income")
    food = category_factory(name="Makanan")
    transaction_factory(account=wallet, category=salary, amount=50_000, txn_type="income")
    transaction_factory(account=wallet, category=food, amount=20_000, txn_type="expense")
    transaction_factory(account=wallet, category=food, amount=30_000, txn_type="transfer", destination=bank)

    with session_factory() as session:
        result = recompute_balances(session, user_id=user.id)

    assert result == {wallet.id: 100_000, bank.id: 30_000}
    with session_factory() as session:
        stored = {a.id: a.current_balance for a in session.exec(select(Account)).all()}
    assert stored == {wallet.id: 100_000, bank.id: 30_000}


def test_recompute_balances_scoped_to_user(
    session_factory, user, other_user, account_factory, category_factory, transaction_factory
):
    mine = account_factory(name="Mine", initial_balance=10)
    theirs = account_factory(name="Theirs", initial_balance=10, owner=other_user)
    cat = category_factory(name="Gaji", category_type="income", owner=other_user)
    transaction_factory(account=theirs, category=cat, amount=5, txn_type="income", owner=other_user)

    with session_factory() as session:
        result = recompute_balances(session, user_id=user.id, account_ids=[mine.id, theirs.id])

    assert result == {mine.id: 10}


def test_recompute_balances_with_empty_selection(session_factory, user):
    with session_factory() as session:
        assert recompute_balances(session, user_id=user.id, account_ids=[]) == {}
