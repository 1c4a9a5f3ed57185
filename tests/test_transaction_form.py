"""Tests for transaction form parsing and validation."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from homeledger.domain.drafts import DebtPaymentDraft, ExpenseDraft, IncomeDraft, TransferDraft
from homeledger.errors import ValidationFailed
from homeledger.services.transaction_form import TransactionForm, parse_draft, to_number


def _form(**data) -> TransactionForm:
    return TransactionForm.from_mapping(data)


def test_income_from_strings_builds_income_draft():
    form = _form(
        type="income",
        description="  Gaji Maret ",
        amount="5000000",
        transaction_date="2024-03-01",
        account_id="1",
        category_id="2",
    )

    assert form.validate() is True
    assert form.errors == {}
    assert form.draft == IncomeDraft(
        description="Gaji Maret",
        amount=5_000_000.0,
        transaction_date=date(2024, 3, 1),
        account_id=1,
        category_id=2,
    )


def test_expense_accepts_optional_debt_link():
    form = _form(
        type="expense",
        description="Bayar Utang",
        amount=250_000,
        transaction_date=date(2024, 3, 5),
        account_id=1,
        category_id=3,
        debt_id=7,
    )

    assert form.validate()
    assert isinstance(form.draft, ExpenseDraft)
    assert form.draft.debt_id == 7


def test_datetime_and_iso_strings_are_reduced_to_dates():
    assert _form(
        type="income",
        description="x",
        amount=1,
        transaction_date=datetime(2024, 3, 1, 14, 30),
        account_id=1,
        category_id=1,
    ).to_draft().transaction_date == date(2024, 3, 1)
    assert _form(
        type="income",
        description="x",
        amount=1,
        transaction_date="2024-03-01T08:15:00",
        account_id=1,
        category_id=1,
    ).to_draft().transaction_date == date(2024, 3, 1)


@pytest.mark.parametrize("amount", ["0", "-10", "abc", None, "nan", "inf", "-inf", float("inf")])
def test_amount_must_be_positive_number(amount):
    form = _form(
        type="expense",
        description="Makan",
        amount=amount,
        transaction_date="2024-03-01",
        account_id=1,
        category_id=1,
    )

    assert form.validate() is False
    assert "amount" in form.errors
    assert form.draft is None


def test_income_and_expense_require_description_and_category():
    form = _form(type="expense", amount="10", transaction_date="2024-03-01", account_id="1")

    assert not form.validate()
    assert "description" in form.errors
    assert "category_id" in form.errors


def test_unknown_and_missing_type_rejected():
    missing = _form(amount=1)
    assert not missing.validate()
    assert missing.errors["type"] == ["Transaction type is required."]

    form = _form(type="refund", amount=1, transaction_date="2024-03-01", account_id=1)
    assert not form.validate()
    assert form.errors["type"] == ["Unknown transaction type 'refund'."]


def test_invalid_date_reported():
    form = _form(
        type="income",
        description="x",
        amount=1,
        transaction_date="01/03/2024",
        account_id=1,
        category_id=1,
    )

    assert not form.validate()
    assert "transaction_date" in form.errors


def test_transfer_requires_distinct_destination():
    form = _form(
        type="transfer",
        amount="100000",
        transaction_date="2024-03-02",
        account_id="4",
        destination_account_id="4",
    )

    assert not form.validate()
    assert "destination_account_id" in form.errors


def test_transfer_needs_no_description():
    form = _form(
        type="transfer",
        amount="100000",
        transaction_date="2024-03-02",
        account_id="4",
        destination_account_id="5",
    )

    assert form.validate()
    assert form.draft == TransferDraft(
        amount=100_000.0,
        transaction_date=date(2024, 3, 2),
        account_id=4,
        destination_account_id=5,
    )


def test_transfer_cannot_carry_debt():
    form = _form(
        type="transfer",
        amount="1",
        transaction_date="2024-03-02",
        account_id=1,
        destination_account_id=2,
        debt_id=3,
    )

    assert not form.validate()
    assert "debt_id" in form.errors


def test_debt_payment_requires_debt():
    missing = _form(type="debt_payment", amount="1", transaction_date="2024-03-02", account_id=1)
    assert not missing.validate()
    assert "debt_id" in missing.errors

    draft = parse_draft(
        {
            "type": "debt_payment",
            "amount": "300000",
            "transaction_date": "2024-03-02",
            "account_id": "1",
            "debt_id": "3",
        }
    )
    assert isinstance(draft, DebtPaymentDraft)
    assert draft.kind == "debt_payment"
    assert draft.debt_id == 3


def test_income_cannot_link_debt_or_destination():
    form = _form(
        type="income",
        description="x",
        amount=1,
        transaction_date="2024-03-01",
        account_id=1,
        category_id=1,
        debt_id=2,
        destination_account_id=3,
    )

    assert not form.validate()
    assert set(form.errors) == {"debt_id", "destination_account_id"}


@pytest.mark.parametrize(
    "extra",
    [
        {"type": "transfer", "destination_account_id": "5"},
        {"type": "debt_payment", "debt_id": "3"},
    ],
)
def test_resolved_category_cannot_be_chosen_by_caller(extra):
    form = _form(amount="10", transaction_date="2024-03-02", account_id="4", category_id="9", **extra)

    assert not form.validate()
    assert list(form.errors) == ["category_id"]
    assert form.draft is None


def test_infinite_transfer_amount_rejected():
    with pytest.raises(ValidationFailed) as excinfo:
        parse_draft(
            {
                "type": "transfer",
                "amount": "inf",
                "transaction_date": "2024-03-02",
                "account_id": "1",
                "destination_account_id": "2",
            }
        )

    assert excinfo.value.errors == {"amount": ["Amount must be a finite number."]}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("12.5", 12.5), (3, 3.0), ("inf", None), (float("nan"), None), ("abc", None), (None, None), (True, None)],
)
def test_to_number(raw, expected):
    assert to_number(raw) == expected


def test_to_draft_raises_with_field_errors():
    with pytest.raises(ValidationFailed) as excinfo:
        parse_draft({"type": "income", "amount": "-1"})

    errors = excinfo.value.errors
    assert "amount" in errors
    assert "account_id" in errors
    assert "transaction_date" in errors


def test_blank_strings_count_as_missing():
    form = _form(
        type="expense",
        description="   ",
        amount="10",
        transaction_date="2024-03-01",
        account_id="1",
        category_id="",
    )

    assert not form.validate()
    assert form.errors["description"] == ["Description is required."]
    assert form.errors["category_id"] == ["Category is required."]
