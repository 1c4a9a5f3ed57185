"""Dashboard overview figures."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..infra.database import SessionFactory
from ..infra.repositories.account import SQLModelAccountRepository
from ..infra.repositories.debt import SQLModelDebtRepository
from ..infra.repositories.savings_goal import SQLModelSavingsGoalRepository
from .reports import load_rows, month_bounds, totals_by_type


@dataclass(slots=True)
class Overview:
    total_balance: float
    account_count: int
    total_debt: float
    savings_target: float
    savings_current: float
    month_income: float
    month_expense: float

    @property
    def month_net(self) -> float:
        return round(self.month_income - self.month_expense, 2)

    @property
    def savings_percentage(self) -> float:
        if self.savings_target <= 0:
            return 0.0
        return round(self.savings_current / self.savings_target * 100, 2)


def build_overview(
    session_factory: SessionFactory, *, user_id: int, today: Optional[date] = None
) -> Overview:
    today = today or date.today()
    accounts = SQLModelAccountRepository(session_factory).list_all(user_id=user_id, active_only=True)
    goals = SQLModelSavingsGoalRepository(session_factory).list_all(user_id=user_id)
    start, end = month_bounds(today.year, today.month)
    totals = totals_by_type(
        load_rows(session_factory, user_id=user_id, start_date=start, end_date=end)
    )
    return Overview(
        total_balance=round(sum(a.current_balance for a in accounts), 2),
        account_count=len(accounts),
        total_debt=SQLModelDebtRepository(session_factory).get_total_outstanding(user_id=user_id),
        savings_target=round(sum(g.target_amount for g in goals), 2),
        savings_current=round(sum(g.current_amount for g in goals), 2),
        month_income=totals["income"],
        month_expense=totals["expense"],
    )
