"""Debt registry services.

``remaining_amount`` is derived: ``total_amount - opening_paid - sum(payments)``
floored at zero, where payments are ledger transactions linked via ``debt_id``.
``opening_paid`` captures repayments made before the debt was recorded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional

from sqlmodel import Session, select

from ..errors import RecordNotFound, ValidationFailed
from ..infra.database import SessionFactory
from ..logging_config import get_logger
from ..models.debt import Debt
from ..models.transaction import Transaction
from .transaction_form import to_number

logger = get_logger(__name__)

_EDITABLE_FIELDS = {
    "creditor_name",
    "total_amount",
    "remaining_amount",
    "interest_rate",
    "monthly_payment",
    "due_date",
}


@dataclass(slots=True)
class DebtPaymentHistory:
    """Payments linked to one debt."""

    debt_id: int
    payments: list[Transaction] = field(default_factory=list)

    @property
    def total_paid(self) -> float:
        return round(sum(float(p.amount) for p in self.payments), 2)

    @property
    def count(self) -> int:
        return len(self.payments)


def derive_remaining(total_amount: float, opening_paid: float, payments: Iterable[float]) -> float:
    """Return the outstanding amount after opening repayments and linked payments."""

    paid = float(opening_paid or 0.0) + sum(float(p) for p in payments)
    return round(max(float(total_amount) - paid, 0.0), 2)


def debt_progress(debt: Debt) -> float:
    """Percentage of the debt already repaid."""

    if not debt.total_amount:
        return 0.0
    return round((debt.total_amount - debt.remaining_amount) / debt.total_amount * 100, 2)


def summarize_debts(debts: Iterable[Debt]) -> dict[str, Any]:
    """Totals across a set of debts."""

    items = list(debts)
    outstanding = [d for d in items if not d.is_paid_off]
    total = sum(d.total_amount for d in items)
    remaining = sum(d.remaining_amount for d in outstanding)
    monthly = sum(d.monthly_payment or 0.0 for d in outstanding)
    return {
        "count": len(items),
        "outstanding_count": len(outstanding),
        "total_amount": round(total, 2),
        "total_remaining": round(remaining, 2),
        "total_monthly_payment": round(monthly, 2),
        "paid_percentage": round((total - sum(d.remaining_amount for d in items)) / total * 100, 2)
        if total
        else 0.0,
    }


def sync_debts(
    session: Session, *, user_id: int, debt_ids: Optional[Iterable[int]] = None
) -> dict[int, float]:
    """Re-derive remaining amounts and paid-off flags inside *session*."""

    statement = select(Debt).where(Debt.user_id == user_id)
    if debt_ids is not None:
        ids = sorted({d for d in debt_ids if d is not None})
        if not ids:
            return {}
        statement = statement.where(Debt.id.in_(ids))  # type: ignore[union-attr]
    debts = list(session.exec(statement).all())
    if not debts:
        return {}

    session.flush()
    payments = session.exec(
        select(Transaction.debt_id, Transaction.amount)
        .where(Transaction.user_id == user_id)
        .where(Transaction.debt_id.in_([d.id for d in debts]))  # type: ignore[union-attr]
    ).all()
    by_debt: dict[int, list[float]] = {}
    for debt_id, amount in payments:
        by_debt.setdefault(debt_id, []).append(float(amount))

    now = datetime.now(timezone.utc)
    result: dict[int, float] = {}
    for debt in debts:
        remaining = derive_remaining(debt.total_amount, debt.opening_paid, by_debt.get(debt.id, []))
        paid_off = remaining <= 0
        if paid_off and not debt.is_paid_off:
            logger.info("Debt paid off", extra={"user_id": user_id, "debt_id": debt.id})
        debt.remaining_amount = remaining
        debt.is_paid_off = paid_off
        debt.updated_at = now
        session.add(debt)
        result[debt.id] = remaining
    return result


def _validate_amounts(total_amount: Any, remaining_amount: Any) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    total = to_number(total_amount)
    if total is None or total <= 0:
        errors.setdefault("total_amount", []).append("Total amount must be greater than zero.")
    if remaining_amount is not None:
        remaining = to_number(remaining_amount)
        if remaining is None or remaining < 0:
            errors.setdefault("remaining_amount", []).append(
                "Remaining amount must be a non-negative number."
            )
        elif total is not None and remaining > total:
            errors.setdefault("remaining_amount", []).append(
                "Remaining amount cannot exceed the total amount."
            )
    return errors


def _validate_terms(values: dict[str, Any]) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for key, label in (("interest_rate", "Interest rate"), ("monthly_payment", "Monthly payment")):
        if values.get(key) is None:
            continue
        parsed = to_number(values[key])
        if parsed is None or parsed < 0:
            errors[key] = [f"{label} must be a non-negative number."]
    return errors


def create_debt(
    session_factory: SessionFactory,
    *,
    user_id: int,
    creditor_name: str,
    total_amount: float,
    remaining_amount: Optional[float] = None,
    interest_rate: float = 0.0,
    monthly_payment: Optional[float] = None,
    due_date: Optional[date] = None,
) -> Debt:
    """Record a new debt. ``remaining_amount`` defaults to the total."""

    errors = _validate_amounts(total_amount, remaining_amount)
    errors.update(
        _validate_terms({"interest_rate": interest_rate, "monthly_payment": monthly_payment})
    )
    if not (creditor_name or "").strip():
        errors.setdefault("creditor_name", []).append("Creditor name is required.")
    if errors:
        raise ValidationFailed(errors)

    total = float(total_amount)
    remaining = total if remaining_amount is None else float(remaining_amount)
    debt = Debt(
        user_id=user_id,
        creditor_name=creditor_name.strip(),
        total_amount=total,
        remaining_amount=remaining,
        opening_paid=round(total - remaining, 2),
        interest_rate=float(interest_rate or 0.0),
        monthly_payment=None if monthly_payment is None else float(monthly_payment),
        due_date=due_date,
        is_paid_off=remaining <= 0,
    )
    with session_factory() as session:
        session.add(debt)
        session.flush()
        session.refresh(debt)
        session.expunge(debt)
    logger.info("Debt created", extra={"user_id": user_id, "debt_id": debt.id})
    return debt


def update_debt(
    session_factory: SessionFactory, debt_id: int, *, user_id: int, **changes: Any
) -> Debt:
    """Apply edits to a debt and re-derive its remaining amount.

    Editing ``remaining_amount`` directly adjusts the opening offset so the
    derived value lands on the requested figure given the payments on record.
    """

    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise ValidationFailed({name: ["Field cannot be edited."] for name in sorted(unknown)})

    with session_factory() as session:
        debt = session.exec(select(Debt).where(Debt.id == debt_id, Debt.user_id == user_id)).first()
        if debt is None:
            raise RecordNotFound("Debt", debt_id)

        errors = _validate_amounts(
            changes.get("total_amount", debt.total_amount), changes.get("remaining_amount")
        )
        errors.update(_validate_terms(changes))
        if "creditor_name" in changes and not (changes["creditor_name"] or "").strip():
            errors.setdefault("creditor_name", []).append("Creditor name is required.")
        if errors:
            raise ValidationFailed(errors)
        total = float(changes.get("total_amount", debt.total_amount))

        if "remaining_amount" in changes:
            paid = sum(
                float(amount)
                for amount in session.exec(
                    select(Transaction.amount)
                    .where(Transaction.user_id == user_id)
                    .where(Transaction.debt_id == debt_id)
                ).all()
            )
            opening = total - float(changes["remaining_amount"]) - paid
            if opening < 0:
                raise ValidationFailed(
                    {
                        "remaining_amount": [
                            "Remaining amount is higher than the total minus recorded payments."
                        ]
                    }
                )
            debt.opening_paid = round(opening, 2)

        for name in ("creditor_name", "interest_rate", "monthly_payment", "due_date"):
            if name in changes:
                value = changes[name]
                if name == "interest_rate":
                    value = float(value or 0.0)
                elif name == "monthly_payment" and value is not None:
                    value = float(value)
                elif isinstance(value, str):
                    value = value.strip()
                setattr(debt, name, value)
        debt.total_amount = total
        session.add(debt)
        sync_debts(session, user_id=user_id, debt_ids=[debt_id])
        session.flush()
        session.refresh(debt)
        session.expunge(debt)
    logger.info("Debt updated", extra={"user_id": user_id, "debt_id": debt_id})
    return debt


def delete_debt(session_factory: SessionFactory, debt_id: int, *, user_id: int) -> int:
    """Delete a debt, unlinking its payments. Returns the number of unlinked transactions."""

    with session_factory() as session:
        debt = session.exec(select(Debt).where(Debt.id == debt_id, Debt.user_id == user_id)).first()
        if debt is None:
            raise RecordNotFound("Debt", debt_id)
        linked = list(
            session.exec(
                select(Transaction)
                .where(Transaction.user_id == user_id)
                .where(Transaction.debt_id == debt_id)
            ).all()
        )
        for txn in linked:
            txn.debt_id = None
            session.add(txn)
        session.flush()
        session.delete(debt)
    logger.info(
        "Debt deleted", extra={"user_id": user_id, "debt_id": debt_id, "unlinked": len(linked)}
    )
    return len(linked)


def payment_history(session_factory: SessionFactory, debt_id: int, *, user_id: int) -> DebtPaymentHistory:
    """Return linked payments for a debt, newest first."""

    with session_factory() as session:
        debt = session.exec(select(Debt).where(Debt.id == debt_id, Debt.user_id == user_id)).first()
        if debt is None:
            raise RecordNotFound("Debt", debt_id)
        payments = list(
            session.exec(
                select(Transaction)
                .where(Transaction.user_id == user_id)
                .where(Transaction.debt_id == debt_id)
                .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())  # type: ignore
            ).all()
        )
        session.expunge_all()
    return DebtPaymentHistory(debt_id=debt_id, payments=payments)
