"""
Error taxonomy for the leave management API.

Every failure a domain operation can report is a ``LeaveError`` subclass
carrying a human-readable message and the HTTP status the API answers with.
The FastAPI exception handlers in ``leave_api.core.responses`` turn them into
the uniform error envelope.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class FieldViolation:
    """A single failed constraint on one field of an entity."""

    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class LeaveError(Exception):
    """Base class for all domain failures."""

    status_code: int = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r})"


class ValidationError(LeaveError):
    """Malformed or missing input, or a business rule such as the balance limit."""

    status_code = 400

    def __init__(self, message: str, violations: Sequence[FieldViolation] = ()):
        self.violations: List[FieldViolation] = list(violations)
        super().__init__(
            message,
            details={"violations": [v.to_dict() for v in self.violations]} if self.violations else None,
        )

    @classmethod
    def from_violations(cls, violations: Sequence[FieldViolation]) -> "ValidationError":
        return cls(", ".join(v.message for v in violations), violations)


class ConflictError(LeaveError):
    """The requested date range clashes with an existing request."""

    status_code = 409


class NotFoundError(LeaveError):
    status_code = 404


class InvalidStateError(LeaveError):
    """A status transition is not permitted from the request's current status."""

    status_code = 409

    def __init__(self, message: str, current_status: str):
        self.current_status = current_status
        super().__init__(message, details={"current_status": current_status})


class BalanceUpdateError(LeaveError):
    """Debiting or crediting an employee balance failed after the status change."""

    status_code = 500
