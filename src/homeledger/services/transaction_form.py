"""Transaction form validation.

Binds raw request data (strings from a form, or already-typed values) and turns
it into one of the typed drafts in :mod:`homeledger.domain.drafts`. Errors are
collected per field so a caller can show them all at once.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..domain.drafts import (
    DebtPaymentDraft,
    ExpenseDraft,
    IncomeDraft,
    TransactionDraft,
    TransferDraft,
)
from ..errors import ValidationFailed
from ..models.transaction import TRANSACTION_TYPES

_KEYS = (
    "type",
    "description",
    "amount",
    "transaction_date",
    "account_id",
    "category_id",
    "destination_account_id",
    "debt_id",
)


def to_number(value: Any) -> Optional[float]:
    """Return *value* as a finite float, or None when it is missing or not a number."""

    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


@dataclass(slots=True)
class TransactionForm:
    """Represents transaction input prior to validation."""

    raw_data: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, list[str]] = field(default_factory=dict, init=False)
    draft: Optional[TransactionDraft] = field(default=None, init=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TransactionForm:
        """Create a form populated from request data."""

        form = cls()
        form.load(data)
        return form

    def load(self, data: Mapping[str, Any]) -> None:
        """Bind incoming mapping data to the form state."""

        self.raw_data = {}
        for key in _KEYS:
            value = data.get(key)
            if isinstance(value, str):
                value = value.strip()
                if value == "":
                    value = None
            self.raw_data[key] = value

    def validate(self) -> bool:
        """Validate the bound data and build the matching draft."""

        self.errors.clear()
        self.draft = None

        txn_type = self._parse_type()
        amount = self._parse_amount()
        occurred_on = self._parse_date()
        account_id = self._parse_id("account_id", required=True, label="Account")
        description = self._parse_description(required=txn_type in {"income", "expense"})

        if txn_type in {"income", "expense"}:
            category_id = self._parse_id("category_id", required=True, label="Category")
            self._forbid("destination_account_id", "Only transfers have a destination account.")
            debt_id = None
            if txn_type == "income":
                self._forbid("debt_id", "Income cannot be linked to a debt.")
            else:
                debt_id = self._parse_id("debt_id", required=False, label="Debt")
            if self.errors:
                return False
            if txn_type == "income":
                self.draft = IncomeDraft(
                    description=description or "",
                    amount=amount,  # type: ignore[arg-type]
                    transaction_date=occurred_on,  # type: ignore[arg-type]
                    account_id=account_id,  # type: ignore[arg-type]
                    category_id=category_id,  # type: ignore[arg-type]
                )
            else:
                self.draft = ExpenseDraft(
                    description=description or "",
                    amount=amount,  # type: ignore[arg-type]
                    transaction_date=occurred_on,  # type: ignore[arg-type]
                    account_id=account_id,  # type: ignore[arg-type]
                    category_id=category_id,  # type: ignore[arg-type]
                    debt_id=debt_id,
                )
            return True

        if txn_type == "transfer":
            destination_id = self._parse_id(
                "destination_account_id", required=True, label="Destination account"
            )
            self._forbid("debt_id", "Transfers cannot be linked to a debt.")
            self._forbid("category_id", "Transfers are filed under the transfer category.")
            if account_id is not None and destination_id is not None and account_id == destination_id:
                self._add_error(
                    "destination_account_id",
                    "Destination account must differ from the source account.",
                )
            if self.errors:
                return False
            self.draft = TransferDraft(
                amount=amount,  # type: ignore[arg-type]
                transaction_date=occurred_on,  # type: ignore[arg-type]
                account_id=account_id,  # type: ignore[arg-type]
                destination_account_id=destination_id,  # type: ignore[arg-type]
                description=description,
            )
            return True

        if txn_type == "debt_payment":
            debt_id = self._parse_id("debt_id", required=True, label="Debt")
            self._forbid("category_id", "Debt payments are filed under the debt payment category.")
            self._forbid("destination_account_id", "Only transfers have a destination account.")
            if self.errors:
                return False
            self.draft = DebtPaymentDraft(
                amount=amount,  # type: ignore[arg-type]
                transaction_date=occurred_on,  # type: ignore[arg-type]
                account_id=account_id,  # type: ignore[arg-type]
                debt_id=debt_id,  # type: ignore[arg-type]
                description=description,
            )
            return True

        return False

    def to_draft(self) -> TransactionDraft:
        """Validate and return the draft, raising ``ValidationFailed`` otherwise."""

        if not self.validate() or self.draft is None:
            raise ValidationFailed(self.errors or {"type": ["Transaction type is required."]})
        return self.draft

    # -- field parsers -----------------------------------------------------

    def _parse_type(self) -> Optional[str]:
        raw = self.raw_data.get("type")
        if raw is None:
            self._add_error("type", "Transaction type is required.")
            return None
        value = str(raw).lower()
        if value not in TRANSACTION_TYPES:
            self._add_error("type", f"Unknown transaction type '{raw}'.")
            return None
        return value

    def _parse_amount(self) -> Optional[float]:
        raw = self.raw_data.get("amount")
        if raw is None:
            self._add_error("amount", "Amount is required.")
            return None
        try:
            parsed = float(raw)
        except (TypeError, ValueError):
            self._add_error("amount", "Enter a valid number for the amount.")
            return None
        if not math.isfinite(parsed):
            self._add_error("amount", "Amount must be a finite number.")
            return None
        if parsed <= 0:
            self._add_error("amount", "Amount must be greater than zero.")
            return None
        return parsed

    def _parse_date(self) -> Optional[date]:
        raw = self.raw_data.get("transaction_date")
        if raw is None:
            self._add_error("transaction_date", "Date is required.")
            return None
        if isinstance(raw, datetime):
            return raw.date()
        if isinstance(raw, date):
            return raw
        text = str(raw)
        try:
            if len(text) == 10:
                return datetime.strptime(text, "%Y-%m-%d").date()
            return datetime.fromisoformat(text).date()
        except ValueError:
            self._add_error("transaction_date", "Enter a valid date (YYYY-MM-DD).")
            return None

    def _parse_description(self, *, required: bool) -> Optional[str]:
        raw = self.raw_data.get("description")
        value = None if raw is None else str(raw)
        if not value:
            if required:
                self._add_error("description", "Description is required.")
            return None
        if len(value) > 255:
            self._add_error("description", "Description must be 255 characters or fewer.")
            return None
        return value

    def _parse_id(self, key: str, *, required: bool, label: str) -> Optional[int]:
        raw = self.raw_data.get(key)
        if raw is None:
            if required:
                self._add_error(key, f"{label} is required.")
            return None
        if isinstance(raw, bool):
            self._add_error(key, f"{label} must be a whole number.")
            return None
        try:
            parsed = int(raw)
        except (TypeError, ValueError):
            self._add_error(key, f"{label} must be a whole number.")
            return None
        if parsed <= 0:
            self._add_error(key, f"{label} must be greater than zero.")
            return None
        return parsed

    def _forbid(self, key: str, message: str) -> None:
        if self.raw_data.get(key) is not None:
            self._add_error(key, message)

    def _add_error(self, field_name: str, message: str) -> None:
        """Accumulate validation errors for a specific field."""

        self.errors.setdefault(field_name, []).append(message)


def parse_draft(data: Mapping[str, Any]) -> TransactionDraft:
    """Shortcut: bind, validate and return a draft or raise ``ValidationFailed``."""

    return TransactionForm.from_mapping(data).to_draft()
