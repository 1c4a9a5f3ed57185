"""Repository protocol definitions for domain layer."""

from .account import AccountRepository
from .budget import BudgetRepository
from .category import CategoryRepository
from .debt import DebtRepository
from .savings_goal import SavingsGoalRepository
from .transaction import TransactionRepository

__all__ = [
    "AccountRepository",
    "BudgetRepository",
    "CategoryRepository",
    "DebtRepository",
    "SavingsGoalRepository",
    "TransactionRepository",
]
