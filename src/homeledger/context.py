"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .domain.repositories import (
    AccountRepository,
    BudgetRepository,
    CategoryRepository,
    DebtRepository,
    SavingsGoalRepository,
    TransactionRepository,
)
from .infra.database import SessionFactory, create_db_engine, create_session_factory, init_database
from .infra.repositories import (
    SQLModelAccountRepository,
    SQLModelBudgetRepository,
    SQLModelCategoryRepository,
    SQLModelDebtRepository,
    SQLModelSavingsGoalRepository,
    SQLModelTransactionRepository,
)
from .models.user import User


@dataclass
class AppContext:
    """Centralized application context with repositories and state."""

    # Configuration
    config: BaseConfig
    engine: Engine

    # Session factory
    session_factory: SessionFactory

    # Repositories
    transaction_repo: TransactionRepository
    account_repo: AccountRepository
    category_repo: CategoryRepository
    budget_repo: BudgetRepository
    debt_repo: DebtRepository
    savings_repo: SavingsGoalRepository

    current_month: date
    current_user: Optional[User] = None

    def require_user_id(self) -> int:
        """Return the current user id or raise if not set."""

        if self.current_user is None or self.current_user.id is None:
            raise RuntimeError("No user selected")
        return self.current_user.id


def create_app_context(
    config: Optional[BaseConfig] = None, *, user: Optional[User] = None
) -> AppContext:
    """Create the engine, initialise the schema and wire up repositories."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        transaction_repo=SQLModelTransactionRepository(session_factory),
        account_repo=SQLModelAccountRepository(session_factory),
        category_repo=SQLModelCategoryRepository(session_factory),
        budget_repo=SQLModelBudgetRepository(session_factory),
        debt_repo=SQLModelDebtRepository(session_factory),
        savings_repo=SQLModelSavingsGoalRepository(session_factory),
        current_month=date.today().replace(day=1),
        current_user=user,
    )
