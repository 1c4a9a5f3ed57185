"""Concrete repository implementations using SQLModel."""

from .account import SQLModelAccountRepository
from .budget import SQLModelBudgetRepository
from .category import SQLModelCategoryRepository
from .debt import SQLModelDebtRepository
from .savings_goal import SQLModelSavingsGoalRepository
from .transaction import SQLModelTransactionRepository

__all__ = [
    "SQLModelAccountRepository",
    "SQLModelBudgetRepository",
    "SQLModelCategoryRepository",
    "SQLModelDebtRepository",
    "SQLModelSavingsGoalRepository",
    "SQLModelTransactionRepository",
]
