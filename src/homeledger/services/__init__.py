"""Service module exports."""

from . import (
    balances,
    budgeting,
    classification,
    debts,
    ledger_service,
    operations,
    overview,
    registries,
    reports,
    savings,
    transaction_form,
)

__all__ = [
    "balances",
    "budgeting",
    "classification",
    "debts",
    "ledger_service",
    "operations",
    "overview",
    "registries",
    "reports",
    "savings",
    "transaction_form",
]
