"""Tests for draft classification into stored transaction columns."""

from __future__ import annotations

from datetime import date

import pytest

from homeledger.domain.drafts import DebtPaymentDraft, ExpenseDraft, IncomeDraft, TransferDraft
from homeledger.errors import ValidationFailed
from homeledger.models import Category, Transaction
from homeledger.services.classification import (
    classify,
    resolve_debt_payment_category,
    resolve_transfer_category,
)

DAY = date(2024, 3, 10)


def _cat(cat_id: int, name: str, cat_type: str) -> Category:
    return Category(id=cat_id, user_id=1, name=name, type=cat_type)


CATEGORIES = [
    _cat(1, "Gaji", "income"),
    _cat(2, "Makanan", "expense"),
    _cat(3, "Transfer", "income"),
    _cat(4, "Pembayaran Utang", "expense"),
]


def test_income_keeps_its_category():
    resolved = classify(
        IncomeDraft(description="Gaji", amount=100.0, transaction_date=DAY, account_id=9, category_id=1),
        categories=CATEGORIES,
    )

    assert resolved.type == "income"
    assert resolved.category_id == 1
    assert resolved.destination_account_id is None
    assert resolved.debt_id is None


def test_category_type_must_match_transaction_type():
    with pytest.raises(ValidationFailed) as excinfo:
        classify(
            ExpenseDraft(description="x", amount=1.0, transaction_date=DAY, account_id=9, category_id=1),
            categories=CATEGORIES,
        )

    assert "category_id" in excinfo.value.errors


def test_unknown_category_rejected():
    with pytest.raises(ValidationFailed):
        classify(
            IncomeDraft(description="x", amount=1.0, transaction_date=DAY, account_id=9, category_id=99),
            categories=CATEGORIES,
        )


def test_transfer_uses_category_named_transfer():
    resolved = classify(
        TransferDraft(amount=5.0, transaction_date=DAY, account_id=1, destination_account_id=2),
        categories=CATEGORIES,
    )

    assert resolved.type == "transfer"
    assert resolved.category_id == 3
    assert resolved.destination_account_id == 2


def test_transfer_falls_back_to_first_category():
    categories = [_cat(5, "Belanja", "expense"), _cat(6, "Gaji", "income")]

    assert resolve_transfer_category(categories).id == 5
    assert resolve_transfer_category([]) is None


def test_transfer_to_same_account_rejected():
    with pytest.raises(ValidationFailed):
        classify(
            TransferDraft(amount=5.0, transaction_date=DAY, account_id=1, destination_account_id=1),
            categories=CATEGORIES,
        )


def test_debt_payment_is_stored_as_expense_with_debt():
    resolved = classify(
        DebtPaymentDraft(amount=300.0, transaction_date=DAY, account_id=1, debt_id=8),
        categories=CATEGORIES,
    )

    assert resolved.type == "expense"
    assert resolved.debt_id == 8
    assert resolved.category_id == 4


def test_debt_payment_falls_back_to_first_expense_category():
    categories = [_cat(1, "Gaji", "income"), _cat(7, "Tagihan", "expense"), _cat(8, "Makan", "expense")]

    assert resolve_debt_payment_category(categories).id == 7


def test_debt_payment_without_expense_category_rejected():
    with pytest.raises(ValidationFailed) as excinfo:
        classify(
            DebtPaymentDraft(amount=300.0, transaction_date=DAY, account_id=1, debt_id=8),
            categories=[_cat(1, "Gaji", "income")],
        )

    assert "category_id" in excinfo.value.errors


def test_configured_reserved_names_are_honoured():
    categories = [_cat(1, "Pindah Dana", "expense"), _cat(2, "Cicilan", "expense")]

    transfer = classify(
        TransferDraft(amount=1.0, transaction_date=DAY, account_id=1, destination_account_id=2),
        categories=categories,
        transfer_category_name="Pindah Dana",
    )
    payment = classify(
        DebtPaymentDraft(amount=1.0, transaction_date=DAY, account_id=1, debt_id=3),
        categories=categories,
        debt_category_name="Cicilan",
    )

    assert transfer.category_id == 1
    assert payment.category_id == 2


def test_apply_to_copies_every_column():
    resolved = classify(
        ExpenseDraft(
            description="Bayar Utang",
            amount=10.0,
            transaction_date=DAY,
            account_id=3,
            category_id=2,
            debt_id=5,
        ),
        categories=CATEGORIES,
    )
    txn = resolved.apply_to(Transaction(user_id=1))

    assert (txn.type, txn.amount, txn.account_id, txn.category_id, txn.debt_id) == (
        "expense",
        10.0,
        3,
        2,
        5,
    )
    assert txn.description == "Bayar Utang"
    assert resolved.as_columns()["transaction_date"] == DAY
