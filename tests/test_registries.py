"""Tests for user, account and category registries."""

from __future__ import annotations

import json
import logging
from datetime import date

import pytest

from homeledger.domain.drafts import IncomeDraft, TransferDraft
from homeledger.errors import IntegrityViolation, RecordNotFound, ValidationFailed
from homeledger.infra.repositories import SQLModelAccountRepository, SQLModelCategoryRepository
from homeledger.services import ledger_service, registries


def test_create_user_unique_username(session_factory):
    user = registries.create_user(session_factory, username="  budi ", currency="idr")

    assert user.username == "budi"
    assert user.currency == "IDR"
    assert registries.get_user_by_username(session_factory, "budi").id == user.id
    with pytest.raises(ValidationFailed):
        registries.create_user(session_factory, username="budi")
    with pytest.raises(ValidationFailed):
        registries.create_user(session_factory, username="siti", currency="RUPIAH")


def test_create_account_starts_at_initial_balance(session_factory, user):
    account = registries.create_account(
        session_factory, user_id=user.id, name="BCA", bank_name="Bank BCA", initial_balance=750_000
    )

    assert account.current_balance == 750_000
    with pytest.raises(ValidationFailed) as excinfo:
        registries.create_account(session_factory, user_id=user.id, name=" ", bank_name="")
    assert set(excinfo.value.errors) == {"name", "bank_name"}


def test_changing_initial_balance_rederives_current(session_factory, user, category_factory):
    account = registries.create_account(
        session_factory, user_id=user.id, name="BCA", bank_name="BCA", initial_balance=1_000
    )
    salary = category_factory(name="Gaji", category_type="income")
    ledger_service.create_transaction(
        session_factory,
        IncomeDraft(
            description="Gaji",
            amount=500,
            transaction_date=date(2024, 3, 1),
            account_id=account.id,
            category_id=salary.id,
        ),
        user_id=user.id,
    )

    updated = registries.update_account(
        session_factory, account.id, user_id=user.id, initial_balance=2_000, name=" BCA Utama "
    )

    assert updated.name == "BCA Utama"
    assert updated.current_balance == 2_500


def test_update_account_rejects_balance_override(session_factory, user, account_factory):
    account = account_factory()

    with pytest.raises(ValidationFailed):
        registries.update_account(session_factory, account.id, user_id=user.id, current_balance=5)


def test_delete_account_restricted_while_referenced(session_factory, user, account_factory, category_factory):
    source = account_factory(name="A", initial_balance=100)
    target = account_factory(name="B")
    spare = account_factory(name="C")
    category_factory()
    ledger_service.create_transaction(
        session_factory,
        TransferDraft(amount=10, transaction_date=date(2024, 3, 1), account_id=source.id, destination_account_id=target.id),
        user_id=user.id,
    )

    with pytest.raises(IntegrityViolation):
        registries.delete_account(session_factory, target.id, user_id=user.id)

    registries.delete_account(session_factory, spare.id, user_id=user.id)
    assert SQLModelAccountRepository(session_factory).get_by_id(spare.id, user_id=user.id) is None


def test_delete_account_of_other_user_not_found(session_factory, user, other_user, account_factory):
    theirs = account_factory(owner=other_user)

    with pytest.raises(RecordNotFound):
        registries.delete_account(session_factory, theirs.id, user_id=user.id)


def test_category_validation(session_factory, user):
    with pytest.raises(ValidationFailed) as excinfo:
        registries.create_category(session_factory, user_id=user.id, name="", type="bonus", color="blue")

    assert set(excinfo.value.errors) == {"name", "type", "color"}

    category = registries.create_category(session_factory, user_id=user.id, name="Hobi")
    assert (category.type, category.color) == ("expense", "#3B82F6")


def test_delete_category_restricted_by_goal_budget_or_transaction(
    session_factory, user, account_factory, category_factory, goal_factory, transaction_factory
):
    from homeledger.services import budgeting

    used_by_txn = category_factory(name="Makanan")
    used_by_goal = category_factory(name="Liburan", category_type="savings")
    used_by_budget = category_factory(name="Tagihan")
    unused = category_factory(name="Lain")
    transaction_factory(account=account_factory(), category=used_by_txn)
    goal_factory(used_by_goal)
    budgeting.upsert_budget(
        session_factory, user_id=user.id, category_id=used_by_budget.id, month=1, year=2024, expected_amount=1
    )

    for category in (used_by_txn, used_by_goal, used_by_budget):
        with pytest.raises(IntegrityViolation):
            registries.delete_category(session_factory, category.id, user_id=user.id)

    registries.delete_category(session_factory, unused.id, user_id=user.id)
    assert SQLModelCategoryRepository(session_factory).get_by_id(unused.id, user_id=user.id) is None


def test_category_type_frozen_once_used(session_factory, user, account_factory, category_factory, transaction_factory):
    food = category_factory(name="Makanan")
    spare = category_factory(name="Spare")
    transaction_factory(account=account_factory(), category=food)

    with pytest.raises(IntegrityViolation):
        registries.update_category(session_factory, food.id, user_id=user.id, type="income")

    renamed = registries.update_category(session_factory, food.id, user_id=user.id, name="Makan", color="#000000")
    retyped = registries.update_category(session_factory, spare.id, user_id=user.id, type="income")
    assert renamed.name == "Makan"
    assert retyped.type == "income"


def test_seed_default_categories_is_idempotent(session_factory, user, category_factory):
    category_factory(name="Makanan")

    created = registries.seed_default_categories(session_factory, user_id=user.id)
    again = registries.seed_default_categories(session_factory, user_id=user.id)

    names = {c.name for c in created}
    assert "Makanan" not in names
    assert {"Transfer", "Pembayaran Utang", "Gaji", "Dana Darurat", "KTA"} <= names
    assert len(created) == len(registries.DEFAULT_CATEGORIES) - 1
    assert again == []


def test_seed_for_unknown_user(session_factory):
    with pytest.raises(RecordNotFound):
        registries.seed_default_categories(session_factory, user_id=404)


def test_seed_logs_created_count_at_info(session_factory, user, structured_logging):
    logging.getLogger("homeledger").setLevel(logging.INFO)

    created = registries.seed_default_categories(session_factory, user_id=user.id)

    lines = [json.loads(line) for line in structured_logging.read_text().splitlines() if line.strip()]
    seeded = [entry for entry in lines if entry["message"] == "Default categories seeded"]
    assert len(created) == len(registries.DEFAULT_CATEGORIES)
    assert seeded[-1]["extra"] == {"user_id": user.id, "created_count": len(created)}


def test_initial_balance_must_be_finite(session_factory, user, account_factory):
    with pytest.raises(ValidationFailed) as excinfo:
        registries.create_account(
            session_factory, user_id=user.id, name="BCA", bank_name="BCA", initial_balance=float("inf")
        )
    assert set(excinfo.value.errors) == {"initial_balance"}

    account = account_factory(initial_balance=100)
    for bad in ("nan", "abc", None):
        with pytest.raises(ValidationFailed) as excinfo:
            registries.update_account(session_factory, account.id, user_id=user.id, initial_balance=bad)
        assert "initial_balance" in excinfo.value.errors
