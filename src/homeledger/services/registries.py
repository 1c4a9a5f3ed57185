"""User, account and category registries.

Deletes are restricted: an account with transactions, or a category referenced
by a transaction, savings goal or budget, raises ``IntegrityViolation``.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, select

from ..errors import IntegrityViolation, RecordNotFound, ValidationFailed
from ..infra.database import SessionFactory
from ..logging_config import get_logger
from ..models.account import Account
from ..models.budget import MonthlyBudget
from ..models.category import CATEGORY_TYPES, DEFAULT_COLOR, Category
from ..models.savings_goal import SavingsGoal
from ..models.transaction import Transaction
from ..models.user import User
from .balances import recompute_balances
from .transaction_form import to_number

logger = get_logger(__name__)

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")

DEFAULT_CATEGORIES: tuple[tuple[str, str, str, str], ...] = (
    # name, type, icon, color
    ("Gaji", "income", "DollarSign", "#10B981"),
    ("Freelance", "income", "TrendingUp", "#10B981"),
    ("Investasi", "income", "Target", "#10B981"),
    ("Transfer", "income", "Banknote", "#10B981"),
    ("Makanan", "expense", "Utensils", "#EF4444"),
    ("Transport", "expense", "Car", "#EF4444"),
    ("Tagihan", "expense", "Home", "#F59E0B"),
    ("Belanja", "expense", "ShoppingBag", "#EF4444"),
    ("Hiburan", "expense", "Gamepad2", "#EF4444"),
    ("Kesehatan", "expense", "Heart", "#F59E0B"),
    ("Pembayaran Utang", "expense", "CreditCard", "#F59E0B"),
    ("Dana Darurat", "savings", "Target", "#3B82F6"),
    ("Liburan", "savings", "Plane", "#3B82F6"),
    ("Kartu Kredit", "debt", "CreditCard", "#F59E0B"),
    ("KTA", "debt", "Building2", "#F59E0B"),
)

_ACCOUNT_FIELDS = {"name", "bank_name", "account_number", "initial_balance", "is_active"}
_CATEGORY_FIELDS = {"name", "type", "icon", "color"}


def _owned(session: Session, model, record_id: int, user_id: int, entity: str):
    row = session.get(model, record_id)
    if row is None or row.user_id != user_id:
        raise RecordNotFound(entity, record_id)
    return row


def _count(session: Session, statement) -> int:
    return int(session.exec(statement).one())


# -- users ----------------------------------------------------------------


def create_user(
    session_factory: SessionFactory,
    *,
    username: str,
    display_name: Optional[str] = None,
    currency: str = "IDR",
) -> User:
    """Create the owning profile. Usernames are unique."""

    username = (username or "").strip()
    if not username:
        raise ValidationFailed({"username": ["Username is required."]})
    currency = (currency or "IDR").strip().upper()
    if len(currency) != 3:
        raise ValidationFailed({"currency": ["Currency must be a 3-letter code."]})

    with session_factory() as session:
        if session.exec(select(User).where(User.username == username)).first() is not None:
            raise ValidationFailed({"username": [f"Username '{username}' is already taken."]})
        user = User(username=username, display_name=display_name, currency=currency)
        session.add(user)
        session.flush()
        session.refresh(user)
        session.expunge(user)
    logger.info("User created", extra={"user_id": user.id, "username": username})
    return user


def get_user_by_username(session_factory: SessionFactory, username: str) -> Optional[User]:
    with session_factory() as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if user:
            session.expunge(user)
        return user


# -- accounts -------------------------------------------------------------


def _validate_account(values: dict[str, Any]) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for key, label in (("name", "Account name"), ("bank_name", "Bank name")):
        if key in values and not (values[key] or "").strip():
            errors[key] = [f"{label} is required."]
    if "initial_balance" in values and to_number(values["initial_balance"]) is None:
        errors["initial_balance"] = ["Enter a finite number for the initial balance."]
    return errors


def create_account(
    session_factory: SessionFactory,
    *,
    user_id: int,
    name: str,
    bank_name: str,
    initial_balance: float = 0.0,
    account_number: Optional[str] = None,
    is_active: bool = True,
) -> Account:
    """Open an account whose current balance starts at the initial balance."""

    errors = _validate_account(
        {"name": name, "bank_name": bank_name, "initial_balance": initial_balance}
    )
    if errors:
        raise ValidationFailed(errors)

    opening = round(float(initial_balance), 2)
    account = Account(
        user_id=user_id,
        name=name.strip(),
        bank_name=bank_name.strip(),
        account_number=account_number,
        initial_balance=opening,
        current_balance=opening,
        is_active=is_active,
    )
    with session_factory() as session:
        session.add(account)
        session.flush()
        session.refresh(account)
        session.expunge(account)
    logger.info("Account created", extra={"user_id": user_id, "account_id": account.id})
    return account


def update_account(
    session_factory: SessionFactory, account_id: int, *, user_id: int, **changes: Any
) -> Account:
    """Edit an account; a new initial balance re-derives the current balance."""

    unknown = set(changes) - _ACCOUNT_FIELDS
    if unknown:
        raise ValidationFailed({name: ["Field cannot be edited."] for name in sorted(unknown)})
    errors = _validate_account(changes)
    if errors:
        raise ValidationFailed(errors)

    with session_factory() as session:
        account = _owned(session, Account, account_id, user_id, "Account")
        for name, value in changes.items():
            if name == "initial_balance":
                value = round(float(value), 2)
            elif isinstance(value, str):
                value = value.strip()
            setattr(account, name, value)
        account.updated_at = datetime.now(timezone.utc)
        session.add(account)
        if "initial_balance" in changes:
            recompute_balances(session, user_id=user_id, account_ids=[account_id])
        session.flush()
        session.refresh(account)
        session.expunge(account)
    logger.info(
        "Account updated",
        extra={"user_id": user_id, "account_id": account_id, "fields": sorted(changes)},
    )
    return account


def delete_account(session_factory: SessionFactory, account_id: int, *, user_id: int) -> None:
    """Delete an account that no transaction references."""

    with session_factory() as session:
        account = _owned(session, Account, account_id, user_id, "Account")
        referenced = _count(
            session,
            select(func.count())
            .select_from(Transaction)
            .where(Transaction.user_id == user_id)
            .where(
                or_(
                    Transaction.account_id == account_id,
                    Transaction.destination_account_id == account_id,
                )
            ),
        )
        if referenced:
            logger.warning(
                "Account delete refused",
                extra={"user_id": user_id, "account_id": account_id, "transactions": referenced},
            )
            raise IntegrityViolation(
                f"Account '{account.name}' is used by {referenced} transaction(s)."
            )
        session.delete(account)
    logger.info("Account deleted", extra={"user_id": user_id, "account_id": account_id})


# -- categories -----------------------------------------------------------


def _validate_category(values: dict[str, Any]) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    if "name" in values and not (values["name"] or "").strip():
        errors["name"] = ["Category name is required."]
    if "type" in values and values["type"] not in CATEGORY_TYPES:
        errors["type"] = [f"Type must be one of: {', '.join(CATEGORY_TYPES)}."]
    if values.get("color") is not None and not _HEX_COLOR.match(values["color"]):
        errors["color"] = ["Color must look like #RRGGBB."]
    return errors


def create_category(
    session_factory: SessionFactory,
    *,
    user_id: int,
    name: str,
    type: str = "expense",
    icon: Optional[str] = None,
    color: Optional[str] = None,
) -> Category:
    errors = _validate_category({"name": name, "type": type, "color": color})
    if errors:
        raise ValidationFailed(errors)

    category = Category(
        user_id=user_id,
        name=name.strip(),
        type=type,
        icon=icon,
        color=color or DEFAULT_COLOR,
    )
    with session_factory() as session:
        session.add(category)
        session.flush()
        session.refresh(category)
        session.expunge(category)
    logger.info(
        "Category created",
        extra={"user_id": user_id, "category_id": category.id, "category_type": type},
    )
    return category


def category_usage(session: Session, category_id: int, *, user_id: int) -> dict[str, int]:
    """Rows referencing a category, keyed by table."""

    return {
        "transactions": _count(
            session,
            select(func.count())
            .select_from(Transaction)
            .where(Transaction.user_id == user_id, Transaction.category_id == category_id),
        ),
        "savings_goals": _count(
            session,
            select(func.count())
            .select_from(SavingsGoal)
            .where(SavingsGoal.user_id == user_id, SavingsGoal.category_id == category_id),
        ),
        "budgets": _count(
            session,
            select(func.count())
            .select_from(MonthlyBudget)
            .where(MonthlyBudget.user_id == user_id, MonthlyBudget.category_id == category_id),
        ),
    }


def update_category(
    session_factory: SessionFactory, category_id: int, *, user_id: int, **changes: Any
) -> Category:
    """Edit a category. The type is frozen once transactions use it."""

    unknown = set(changes) - _CATEGORY_FIELDS
    if unknown:
        raise ValidationFailed({name: ["Field cannot be edited."] for name in sorted(unknown)})
    errors = _validate_category(changes)
    if errors:
        raise ValidationFailed(errors)

    with session_factory() as session:
        category = _owned(session, Category, category_id, user_id, "Category")
        if "type" in changes and changes["type"] != category.type:
            in_use = category_usage(session, category_id, user_id=user_id)["transactions"]
            if in_use:
                raise IntegrityViolation(
                    f"Category '{category.name}' has {in_use} transaction(s); its type cannot change."
                )
        for name, value in changes.items():
            setattr(category, name, value.strip() if name == "name" else value)
        category.updated_at = datetime.now(timezone.utc)
        session.add(category)
        session.flush()
        session.refresh(category)
        session.expunge(category)
    logger.info(
        "Category updated",
        extra={"user_id": user_id, "category_id": category_id, "fields": sorted(changes)},
    )
    return category


def delete_category(session_factory: SessionFactory, category_id: int, *, user_id: int) -> None:
    """Delete a category that nothing references."""

    with session_factory() as session:
        category = _owned(session, Category, category_id, user_id, "Category")
        usage = category_usage(session, category_id, user_id=user_id)
        if any(usage.values()):
            logger.warning(
                "Category delete refused",
                extra={"user_id": user_id, "category_id": category_id, **usage},
            )
            detail = ", ".join(f"{count} {key.replace('_', ' ')}" for key, count in usage.items() if count)
            raise IntegrityViolation(f"Category '{category.name}' is still used by {detail}.")
        session.delete(category)
    logger.info("Category deleted", extra={"user_id": user_id, "category_id": category_id})


def seed_default_categories(session_factory: SessionFactory, *, user_id: int) -> list[Category]:
    """Create the default category set, skipping names the user already has."""

    created: list[Category] = []
    with session_factory() as session:
        if session.get(User, user_id) is None:
            raise RecordNotFound("User", user_id)
        existing = set(session.exec(select(Category.name).where(Category.user_id == user_id)).all())
        for name, category_type, icon, color in DEFAULT_CATEGORIES:
            if name in existing:
                continue
            category = Category(user_id=user_id, name=name, type=category_type, icon=icon, color=color)
            session.add(category)
            created.append(category)
        session.flush()
        for category in created:
            session.refresh(category)
            session.expunge(category)
    logger.info("Default categories seeded", extra={"user_id": user_id, "created_count": len(created)})
    return created
