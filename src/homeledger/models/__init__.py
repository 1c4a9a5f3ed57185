"""SQLModel table exports."""

from .account import Account
from .budget import MonthlyBudget
from .category import CATEGORY_TYPES, Category
from .debt import Debt
from .savings_goal import SavingsGoal
from .transaction import STORED_TYPES, TRANSACTION_TYPES, Transaction
from .user import User

__all__ = [
    "Account",
    "CATEGORY_TYPES",
    "Category",
    "Debt",
    "MonthlyBudget",
    "STORED_TYPES",
    "SavingsGoal",
    "TRANSACTION_TYPES",
    "Transaction",
    "User",
]
