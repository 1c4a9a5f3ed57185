"""Reporting utilities for HomeLedger.

Aggregations are pure functions over lists of ``TransactionView`` rows and are
recomputed on every call. The ``build_*`` helpers load the rows they need from
the database and hand them to the pure functions.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Optional

from ..domain.views import TransactionView
from ..infra.database import SessionFactory
from ..infra.repositories.transaction import fetch_views
from ..models.budget import MonthlyBudget

UNCATEGORIZED_LABEL = "Lainnya"
TOP_EXPENSE_CATEGORIES = 8


@dataclass(slots=True)
class CategoryTotal:
    category_id: Optional[int]
    name: str
    amount: float
    percentage: float
    count: int = 0


@dataclass(slots=True)
class AccountActivity:
    account_id: int
    name: Optional[str]
    income: float = 0.0
    expense: float = 0.0
    count: int = 0

    @property
    def net(self) -> float:
        return round(self.income - self.expense, 2)


@dataclass(slots=True)
class DailyPoint:
    day: date
    income: float
    expense: float


@dataclass(slots=True)
class PeriodSummary:
    start_date: Optional[date]
    end_date: Optional[date]
    totals: dict[str, float]
    categories: list[CategoryTotal]
    accounts: list[AccountActivity]


@dataclass(slots=True)
class MonthlyReport:
    """Current vs previous month figures for one calendar month."""

    year: int
    month: int
    income: float
    expense: float
    savings: float
    previous_income: float
    previous_expense: float
    previous_savings: float
    growth: dict[str, float]
    daily: list[DailyPoint] = field(default_factory=list)
    top_expenses: list[CategoryTotal] = field(default_factory=list)
    accounts: list[AccountActivity] = field(default_factory=list)
    transaction_count: int = 0


@dataclass(slots=True)
class MonthRow:
    month: int
    income: float
    expense: float

    @property
    def savings(self) -> float:
        return round(self.income - self.expense, 2)


@dataclass(slots=True)
class AnnualReport:
    year: int
    months: list[MonthRow]
    total_income: float
    total_expense: float
    average_income: float
    average_expense: float
    expense_categories: list[CategoryTotal]
    growth: dict[str, float]

    @property
    def total_savings(self) -> float:
        return round(self.total_income - self.total_expense, 2)

    @property
    def average_savings(self) -> float:
        return round(self.average_income - self.average_expense, 2)


@dataclass(slots=True)
class BudgetTrendPoint:
    year: int
    month: int
    expected: float
    actual: float

    @property
    def difference(self) -> float:
        return round(self.actual - self.expected, 2)


# -- calendar helpers ------------------------------------------------------


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""

    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move ``delta`` months forward (negative for backward)."""

    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def in_range(
    rows: Iterable[TransactionView], start: Optional[date], end: Optional[date]
) -> list[TransactionView]:
    return [
        r
        for r in rows
        if (start is None or r.transaction_date >= start) and (end is None or r.transaction_date <= end)
    ]


# -- pure aggregations -----------------------------------------------------


def growth(current: float, previous: float) -> float:
    """Period-over-period change in percent."""

    if previous == 0:
        if current > 0:
            return 100.0
        if current < 0:
            return -100.0
        return 0.0
    return round((current - previous) / abs(previous) * 100, 2)


def totals_by_type(rows: Iterable[TransactionView]) -> dict[str, float]:
    """Sum amounts per stored type."""

    totals = {"income": 0.0, "expense": 0.0, "transfer": 0.0}
    for row in rows:
        if row.type in totals:
            totals[row.type] += float(row.amount)
    return {key: round(value, 2) for key, value in totals.items()}


def category_breakdown(
    rows: Iterable[TransactionView], txn_type: str = "expense", *, limit: Optional[int] = None
) -> list[CategoryTotal]:
    """Per-category totals of one type, largest first, with share of the type total."""

    buckets: dict[Optional[int], CategoryTotal] = {}
    grand_total = 0.0
    for row in rows:
        if row.type != txn_type:
            continue
        key = row.category_id if row.category_name else None
        bucket = buckets.get(key)
        if bucket is None:
            bucket = CategoryTotal(
                category_id=key,
                name=row.category_name or UNCATEGORIZED_LABEL,
                amount=0.0,
                percentage=0.0,
            )
            buckets[key] = bucket
        bucket.amount += float(row.amount)
        bucket.count += 1
        grand_total += float(row.amount)

    items = sorted(buckets.values(), key=lambda b: b.amount, reverse=True)
    for item in items:
        item.percentage = round(item.amount / grand_total * 100, 2) if grand_total else 0.0
        item.amount = round(item.amount, 2)
    return items[:limit] if limit is not None else items


def account_activity(rows: Iterable[TransactionView]) -> list[AccountActivity]:
    """Income minus expense for every account a transaction references."""

    activity: dict[int, AccountActivity] = {}

    def _bucket(account_id: int, name: Optional[str]) -> AccountActivity:
        if account_id not in activity:
            activity[account_id] = AccountActivity(account_id=account_id, name=name)
        return activity[account_id]

    for row in rows:
        source = _bucket(row.account_id, row.account_name)
        source.count += 1
        if row.type == "income":
            source.income += float(row.amount)
        elif row.type == "expense":
            source.expense += float(row.amount)
        if row.destination_account_id is not None:
            _bucket(row.destination_account_id, row.destination_account_name).count += 1

    for item in activity.values():
        item.income = round(item.income, 2)
        item.expense = round(item.expense, 2)
    return sorted(activity.values(), key=lambda a: a.account_id)


def daily_series(rows: Iterable[TransactionView], year: int, month: int) -> list[DailyPoint]:
    """Income and expense for every day of the month, zero-filled."""

    start, end = month_bounds(year, month)
    income = [0.0] * end.day
    expense = [0.0] * end.day
    for row in in_range(rows, start, end):
        slot = row.transaction_date.day - 1
        if row.type == "income":
            income[slot] += float(row.amount)
        elif row.type == "expense":
            expense[slot] += float(row.amount)
    return [
        DailyPoint(day=date(year, month, i + 1), income=round(income[i], 2), expense=round(expense[i], 2))
        for i in range(end.day)
    ]


def period_summary(
    rows: Iterable[TransactionView],
    start: Optional[date] = None,
    end: Optional[date] = None,
    *,
    txn_type: Optional[str] = None,
) -> PeriodSummary:
    """Totals, category shares and account activity for a date range."""

    selected = in_range(rows, start, end)
    if txn_type == "debt_payment":
        selected = [r for r in selected if r.is_debt_payment]
    elif txn_type:
        selected = [r for r in selected if r.type == txn_type]
    category_type = "expense" if txn_type in (None, "debt_payment") else txn_type
    return PeriodSummary(
        start_date=start,
        end_date=end,
        totals=totals_by_type(selected),
        categories=category_breakdown(selected, category_type),
        accounts=account_activity(selected),
    )


def monthly_report(
    rows: Sequence[TransactionView], year: int, month: int, *, top: int = TOP_EXPENSE_CATEGORIES
) -> MonthlyReport:
    """Build the month view, comparing against the previous calendar month."""

    current = in_range(rows, *month_bounds(year, month))
    previous = in_range(rows, *month_bounds(*shift_month(year, month, -1)))
    now_totals = totals_by_type(current)
    then_totals = totals_by_type(previous)
    savings = round(now_totals["income"] - now_totals["expense"], 2)
    previous_savings = round(then_totals["income"] - then_totals["expense"], 2)

    return MonthlyReport(
        year=year,
        month=month,
        income=now_totals["income"],
        expense=now_totals["expense"],
        savings=savings,
        previous_income=then_totals["income"],
        previous_expense=then_totals["expense"],
        previous_savings=previous_savings,
        growth={
            "income": growth(now_totals["income"], then_totals["income"]),
            "expense": growth(now_totals["expense"], then_totals["expense"]),
            "savings": growth(savings, previous_savings),
        },
        daily=daily_series(current, year, month),
        top_expenses=category_breakdown(current, "expense", limit=top),
        accounts=account_activity(current),
        transaction_count=len(current),
    )


def _month_rows(rows: Iterable[TransactionView], year: int) -> list[MonthRow]:
    months = [MonthRow(month=m, income=0.0, expense=0.0) for m in range(1, 13)]
    for row in rows:
        if row.transaction_date.year != year:
            continue
        slot = months[row.transaction_date.month - 1]
        if row.type == "income":
            slot.income += float(row.amount)
        elif row.type == "expense":
            slot.expense += float(row.amount)
    for slot in months:
        slot.income = round(slot.income, 2)
        slot.expense = round(slot.expense, 2)
    return months


def annual_report(rows: Sequence[TransactionView], year: int) -> AnnualReport:
    """Twelve monthly rows, yearly totals and averages, and growth vs the previous year."""

    months = _month_rows(rows, year)
    previous = _month_rows(rows, year - 1)
    total_income = round(sum(m.income for m in months), 2)
    total_expense = round(sum(m.expense for m in months), 2)
    previous_income = sum(m.income for m in previous)
    previous_expense = sum(m.expense for m in previous)

    return AnnualReport(
        year=year,
        months=months,
        total_income=total_income,
        total_expense=total_expense,
        average_income=round(total_income / 12, 2),
        average_expense=round(total_expense / 12, 2),
        expense_categories=category_breakdown(
            in_range(rows, date(year, 1, 1), date(year, 12, 31)), "expense"
        ),
        growth={
            "income": growth(total_income, previous_income),
            "expense": growth(total_expense, previous_expense),
            "savings": growth(total_income - total_expense, previous_income - previous_expense),
        },
    )


def budget_trend(
    budgets: Iterable[MonthlyBudget],
    rows: Iterable[TransactionView],
    *,
    year: int,
    month: int,
    months: int = 6,
    txn_type: str = "expense",
    category_types: Mapping[int, str],
) -> list[BudgetTrendPoint]:
    """Expected vs actual for the ``months`` months ending at (year, month).

    Only budgeted categories whose type is ``txn_type`` count towards either side.
    """

    window = [shift_month(year, month, -offset) for offset in range(months - 1, -1, -1)]
    expected: dict[tuple[int, int], float] = {key: 0.0 for key in window}
    budgeted: dict[tuple[int, int], set[int]] = {key: set() for key in window}
    for budget in budgets:
        key = (budget.year, budget.month)
        if key not in expected or category_types.get(budget.category_id) != txn_type:
            continue
        expected[key] += float(budget.expected_amount)
        budgeted[key].add(budget.category_id)

    actual: dict[tuple[int, int], float] = {key: 0.0 for key in window}
    for row in rows:
        key = (row.transaction_date.year, row.transaction_date.month)
        if key in actual and row.type == txn_type and row.category_id in budgeted[key]:
            actual[key] += float(row.amount)

    return [
        BudgetTrendPoint(
            year=y, month=m, expected=round(expected[(y, m)], 2), actual=round(actual[(y, m)], 2)
        )
        for y, m in window
    ]


# -- loaders ---------------------------------------------------------------


def load_rows(
    session_factory: SessionFactory,
    *,
    user_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[TransactionView]:
    with session_factory() as session:
        return fetch_views(session, user_id=user_id, start_date=start_date, end_date=end_date)


def build_monthly_report(
    session_factory: SessionFactory, *, user_id: int, year: int, month: int
) -> MonthlyReport:
    start, _ = month_bounds(*shift_month(year, month, -1))
    _, end = month_bounds(year, month)
    rows = load_rows(session_factory, user_id=user_id, start_date=start, end_date=end)
    return monthly_report(rows, year, month)


def build_annual_report(session_factory: SessionFactory, *, user_id: int, year: int) -> AnnualReport:
    rows = load_rows(
        session_factory,
        user_id=user_id,
        start_date=date(year - 1, 1, 1),
        end_date=date(year, 12, 31),
    )
    return annual_report(rows, year)


def report_to_dict(report: Any) -> dict[str, Any]:
    """Convert a report dataclass (and derived properties) into plain data."""

    data = asdict(report)
    if isinstance(report, MonthlyReport):
        for item, raw in zip(report.accounts, data["accounts"]):
            raw["net"] = item.net
    if isinstance(report, AnnualReport):
        data["total_savings"] = report.total_savings
        data["average_savings"] = report.average_savings
        for item, raw in zip(report.months, data["months"]):
            raw["savings"] = item.savings
    return data
