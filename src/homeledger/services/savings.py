"""Savings goal services.

``is_achieved`` always mirrors ``current_amount >= target_amount`` after a write
through this module.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional

from sqlmodel import Session, select

from ..errors import RecordNotFound, ValidationFailed
from ..infra.database import SessionFactory
from ..logging_config import get_logger
from ..models.category import Category
from ..models.savings_goal import SavingsGoal
from .transaction_form import to_number

logger = get_logger(__name__)

_EDITABLE_FIELDS = {"name", "target_amount", "current_amount", "target_date", "category_id"}


def goal_progress(goal: SavingsGoal) -> float:
    """Percentage of the target saved, capped at 100."""

    if not goal.target_amount or goal.target_amount <= 0:
        return 0.0
    return round(min(goal.current_amount / goal.target_amount * 100, 100.0), 2)


def months_to_goal(goal: SavingsGoal, monthly_contribution: float) -> Optional[int]:
    """Whole months left at a fixed contribution; None when nothing is contributed."""

    remaining = goal.target_amount - goal.current_amount
    if remaining <= 0:
        return 0
    if monthly_contribution is None or monthly_contribution <= 0:
        return None
    return math.ceil(remaining / monthly_contribution)


def summarize_goals(goals: Iterable[SavingsGoal]) -> dict[str, Any]:
    items = list(goals)
    target = round(sum(g.target_amount for g in items), 2)
    saved = round(sum(g.current_amount for g in items), 2)
    return {
        "count": len(items),
        "achieved_count": sum(1 for g in items if g.is_achieved),
        "total_target": target,
        "total_saved": saved,
        "percentage": round(saved / target * 100, 2) if target > 0 else 0.0,
    }


def _validate(values: dict[str, Any]) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    if "name" in values and not (values["name"] or "").strip():
        errors["name"] = ["Name is required."]
    if "target_amount" in values:
        target = to_number(values["target_amount"])
        if target is None or target <= 0:
            errors["target_amount"] = ["Target amount must be greater than zero."]
    if "current_amount" in values:
        current = to_number(values["current_amount"])
        if current is None or current < 0:
            errors["current_amount"] = ["Current amount cannot be negative."]
    return errors


def _check_category(session: Session, category_id: Optional[int], user_id: int) -> None:
    category = session.get(Category, category_id) if category_id is not None else None
    if category is None or category.user_id != user_id:
        raise ValidationFailed({"category_id": ["Category not found."]})


def _load(session: Session, goal_id: int, user_id: int) -> SavingsGoal:
    goal = session.exec(
        select(SavingsGoal).where(SavingsGoal.id == goal_id, SavingsGoal.user_id == user_id)
    ).first()
    if goal is None:
        raise RecordNotFound("SavingsGoal", goal_id)
    return goal


def _finish(session: Session, goal: SavingsGoal) -> SavingsGoal:
    goal.is_achieved = goal.current_amount >= goal.target_amount
    goal.updated_at = datetime.now(timezone.utc)
    session.add(goal)
    session.flush()
    session.refresh(goal)
    session.expunge(goal)
    return goal


def create_goal(
    session_factory: SessionFactory,
    *,
    user_id: int,
    name: str,
    target_amount: float,
    category_id: int,
    current_amount: float = 0.0,
    target_date: Optional[date] = None,
) -> SavingsGoal:
    errors = _validate(
        {"name": name, "target_amount": target_amount, "current_amount": current_amount}
    )
    if errors:
        raise ValidationFailed(errors)

    with session_factory() as session:
        _check_category(session, category_id, user_id)
        goal = SavingsGoal(
            user_id=user_id,
            name=name.strip(),
            target_amount=float(target_amount),
            current_amount=float(current_amount),
            target_date=target_date,
            category_id=category_id,
        )
        goal = _finish(session, goal)
    logger.info("Savings goal created", extra={"user_id": user_id, "goal_id": goal.id})
    return goal


def update_goal(
    session_factory: SessionFactory, goal_id: int, *, user_id: int, **changes: Any
) -> SavingsGoal:
    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise ValidationFailed({name: ["Field cannot be edited."] for name in sorted(unknown)})
    errors = _validate(changes)
    if errors:
        raise ValidationFailed(errors)

    with session_factory() as session:
        goal = _load(session, goal_id, user_id)
        if "category_id" in changes:
            _check_category(session, changes["category_id"], user_id)
        for name, value in changes.items():
            if name in {"target_amount", "current_amount"}:
                value = float(value)
            elif name == "name":
                value = value.strip()
            setattr(goal, name, value)
        goal = _finish(session, goal)
    logger.info(
        "Savings goal updated",
        extra={"user_id": user_id, "goal_id": goal_id, "fields": sorted(changes)},
    )
    return goal


def contribute(
    session_factory: SessionFactory, goal_id: int, amount: float, *, user_id: int
) -> SavingsGoal:
    """Add *amount* (negative to withdraw) to a goal's saved balance."""

    delta = to_number(amount)
    if delta is None or delta == 0:
        raise ValidationFailed({"amount": ["Contribution must be a non-zero number."]})

    with session_factory() as session:
        goal = _load(session, goal_id, user_id)
        updated = round(goal.current_amount + delta, 2)
        if updated < 0:
            raise ValidationFailed({"amount": ["Withdrawal exceeds the saved amount."]})
        was_achieved = goal.is_achieved
        goal.current_amount = updated
        goal = _finish(session, goal)
    if goal.is_achieved and not was_achieved:
        logger.info("Savings goal achieved", extra={"user_id": user_id, "goal_id": goal_id})
    logger.info(
        "Savings contribution recorded",
        extra={"user_id": user_id, "goal_id": goal_id, "amount": delta},
    )
    return goal


def delete_goal(session_factory: SessionFactory, goal_id: int, *, user_id: int) -> None:
    with session_factory() as session:
        goal = _load(session, goal_id, user_id)
        session.delete(goal)
    logger.info("Savings goal deleted", extra={"user_id": user_id, "goal_id": goal_id})
