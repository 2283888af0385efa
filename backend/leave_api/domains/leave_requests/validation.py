from __future__ import annotations

from datetime import date, datetime
from typing import List, Union

from leave_api.core.errors import FieldViolation, ValidationError

from .entities import MAX_LEAVE_TYPE_LENGTH, MAX_REASON_LENGTH, LeaveRequestRecord, LeaveStatus

DateInput = Union[date, str]


def parse_date(value: DateInput, field: str) -> date:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string; anything else is a validation failure."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    violation = FieldViolation(field, f"{field} must be a valid date (YYYY-MM-DD), got {value!r}")
    raise ValidationError(violation.message, [violation])


def validate_leave_request(record: LeaveRequestRecord) -> List[FieldViolation]:
    violations: List[FieldViolation] = []

    if record.employee_id is None:
        violations.append(FieldViolation("employee_id", "User is required"))
    if not isinstance(record.leave_type, str) or not record.leave_type.strip():
        violations.append(FieldViolation("leave_type", "Leave type must be a non-empty string"))
    elif len(record.leave_type) > MAX_LEAVE_TYPE_LENGTH:
        violations.append(
            FieldViolation("leave_type", f"Leave type cannot exceed {MAX_LEAVE_TYPE_LENGTH} characters")
        )
    if not isinstance(record.start_date, date):
        violations.append(FieldViolation("start_date", "Start date must be a date"))
    if not isinstance(record.end_date, date):
        violations.append(FieldViolation("end_date", "End date must be a date"))
    if not isinstance(record.reason, str):
        violations.append(FieldViolation("reason", "Reason must be a string"))
    elif len(record.reason) > MAX_REASON_LENGTH:
        violations.append(FieldViolation("reason", f"Reason cannot exceed {MAX_REASON_LENGTH} characters"))
    try:
        LeaveStatus(record.status)
    except ValueError:
        violations.append(FieldViolation("status", f"Unknown status: {record.status}"))

    return violations


def ensure_valid(record: LeaveRequestRecord) -> None:
    violations = validate_leave_request(record)
    if violations:
        raise ValidationError.from_violations(violations)
