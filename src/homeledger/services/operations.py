"""Operation boundary for callers that want a result instead of an exception."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from ..errors import HomeLedgerError, ValidationFailed
from ..logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class OperationResult(Generic[T]):
    """Outcome of a service call."""

    ok: bool
    value: Optional[T] = None
    error: Optional[Exception] = None
    message: str = ""
    errors: dict[str, list[str]] = field(default_factory=dict)


def run_operation(name: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> OperationResult[T]:
    """Call ``func`` and fold expected failures into an ``OperationResult``.

    Domain errors are logged at WARNING, database errors with the traceback.
    Anything else propagates.
    """

    try:
        value = func(*args, **kwargs)
    except HomeLedgerError as exc:
        logger.warning(
            "Operation rejected",
            extra={"operation": name, "error_type": type(exc).__name__, "detail": str(exc)},
        )
        errors = exc.errors if isinstance(exc, ValidationFailed) else {}
        return OperationResult(
            ok=False, error=exc, message=f"Failed to {name}: {exc}", errors=errors
        )
    except SQLAlchemyError as exc:
        logger.exception("Operation failed", extra={"operation": name})
        return OperationResult(
            ok=False, error=exc, message=f"Failed to {name}: database error"
        )
    return OperationResult(ok=True, value=value, message=f"{name} succeeded")
