"""Budgeting domain services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from ..domain.views import TransactionView
from ..errors import ValidationFailed
from ..infra.database import SessionFactory
from ..infra.repositories.budget import SQLModelBudgetRepository
from ..infra.repositories.category import SQLModelCategoryRepository
from ..logging_config import get_logger
from ..models.budget import MonthlyBudget
from ..models.category import Category
from .reports import load_rows, month_bounds
from .transaction_form import to_number

logger = get_logger(__name__)


def budget_status(ratio: float, txn_type: str) -> str:
    """Classify an actual/expected percentage."""

    if txn_type == "income":
        if ratio >= 100:
            return "achieved"
        if ratio < 50:
            return "low"
        return "ok"
    if ratio > 100:
        return "over"
    if ratio > 80:
        return "warning"
    return "ok"


@dataclass(slots=True)
class BudgetComparison:
    """Expected vs actual for one category in one month."""

    category_id: int
    category_name: str
    category_type: str
    month: int
    year: int
    expected: float
    actual: float
    budget_id: Optional[int] = None

    @property
    def ratio(self) -> float:
        if self.expected <= 0:
            return 0.0
        return round(self.actual / self.expected * 100, 2)

    @property
    def progress(self) -> float:
        return min(self.ratio, 100.0)

    @property
    def difference(self) -> float:
        return round(self.actual - self.expected, 2)

    @property
    def status(self) -> str:
        return budget_status(self.ratio, self.category_type)


@dataclass(slots=True)
class BudgetTotals:
    txn_type: str
    expected: float
    actual: float

    @property
    def total_progress(self) -> int:
        if self.expected <= 0:
            return 0
        return round(self.actual / self.expected * 100)

    @property
    def difference(self) -> float:
        return round(self.actual - self.expected, 2)


def actual_for(
    transactions: Iterable[TransactionView], *, category_id: int, txn_type: str, month: int, year: int
) -> float:
    """Sum of amounts matching category, type and calendar month."""

    total = 0.0
    for txn in transactions:
        if (
            txn.category_id == category_id
            and txn.type == txn_type
            and txn.transaction_date.month == month
            and txn.transaction_date.year == year
        ):
            total += float(txn.amount)
    return round(total, 2)


def compare_budgets(
    budgets: Iterable[MonthlyBudget],
    transactions: Iterable[TransactionView],
    *,
    categories: Mapping[int, Category],
) -> list[BudgetComparison]:
    """Compose budget vs actual comparisons, ordered by category name."""

    txns = list(transactions)
    comparisons: list[BudgetComparison] = []
    for budget in budgets:
        category = categories.get(budget.category_id)
        if category is None:
            continue
        comparisons.append(
            BudgetComparison(
                category_id=budget.category_id,
                category_name=category.name,
                category_type=category.type,
                month=budget.month,
                year=budget.year,
                expected=round(float(budget.expected_amount), 2),
                actual=actual_for(
                    txns,
                    category_id=budget.category_id,
                    txn_type=category.type,
                    month=budget.month,
                    year=budget.year,
                ),
                budget_id=budget.id,
            )
        )
    comparisons.sort(key=lambda c: (c.category_type, c.category_name.lower()))
    return comparisons


def summarize_comparisons(comparisons: Iterable[BudgetComparison], txn_type: str) -> BudgetTotals:
    """Totals across every comparison of one category type."""

    selected = [c for c in comparisons if c.category_type == txn_type]
    return BudgetTotals(
        txn_type=txn_type,
        expected=round(sum(c.expected for c in selected), 2),
        actual=round(sum(c.actual for c in selected), 2),
    )


def _whole_number(value: object) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return None


def upsert_budget(
    session_factory: SessionFactory,
    *,
    user_id: int,
    category_id: int,
    month: int,
    year: int,
    expected_amount: float,
) -> MonthlyBudget:
    """Create or replace the budget for (category, month, year)."""

    errors: dict[str, list[str]] = {}
    month_number, year_number = _whole_number(month), _whole_number(year)
    if month_number is None or not 1 <= month_number <= 12:
        errors["month"] = ["Month must be a whole number between 1 and 12."]
    if year_number is None:
        errors["year"] = ["Year must be a whole number."]
    expected = to_number(expected_amount)
    if expected is None or expected < 0:
        errors["expected_amount"] = ["Expected amount must be a non-negative number."]
    if errors:
        raise ValidationFailed(errors)

    category = SQLModelCategoryRepository(session_factory).get_by_id(category_id, user_id=user_id)
    if category is None:
        raise ValidationFailed({"category_id": ["Category not found."]})

    budget = SQLModelBudgetRepository(session_factory).upsert(
        category_id=category_id,
        month=month_number,
        year=year_number,
        expected_amount=round(expected, 2),
        user_id=user_id,
    )
    logger.info(
        "Budget saved",
        extra={
            "user_id": user_id,
            "category_id": category_id,
            "period": f"{year_number:04d}-{month_number:02d}",
            "expected_amount": budget.expected_amount,
        },
    )
    return budget


def build_budget_comparison(
    session_factory: SessionFactory, *, user_id: int, month: int, year: int
) -> list[BudgetComparison]:
    """Load budgets, categories and the month's transactions and compare them."""

    budgets = SQLModelBudgetRepository(session_factory).list_for_month(month, year, user_id=user_id)
    categories = {
        c.id: c for c in SQLModelCategoryRepository(session_factory).list_all(user_id=user_id)
    }
    start, end = month_bounds(year, month)
    rows = load_rows(session_factory, user_id=user_id, start_date=start, end_date=end)
    return compare_budgets(budgets, rows, categories=categories)  # type: ignore[arg-type]
