"""Exception types raised by HomeLedger services."""

from __future__ import annotations

from collections.abc import Mapping


class HomeLedgerError(Exception):
    """Base class for errors a caller is expected to handle."""


class ValidationFailed(HomeLedgerError, ValueError):
    """Input was rejected before anything was written."""

    def __init__(self, errors: Mapping[str, list[str]] | str, *, field: str = "__all__"):
        if isinstance(errors, str):
            errors = {field: [errors]}
        self.errors: dict[str, list[str]] = {key: list(msgs) for key, msgs in errors.items()}
        super().__init__(self._summary())

    def _summary(self) -> str:
        parts = []
        for key, messages in self.errors.items():
            joined = " ".join(messages)
            parts.append(joined if key == "__all__" else f"{key}: {joined}")
        return "; ".join(parts) or "Invalid input."


class RecordNotFound(HomeLedgerError, LookupError):
    """A referenced row does not exist or belongs to another user."""

    def __init__(self, entity: str, record_id: object):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} {record_id} not found")


class IntegrityViolation(HomeLedgerError):
    """A delete or update would break a referential policy."""
