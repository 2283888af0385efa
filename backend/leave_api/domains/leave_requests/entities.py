from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

DEFAULT_LEAVE_TYPE = "Annual Leave"
MAX_LEAVE_TYPE_LENGTH = 50
MAX_REASON_LENGTH = 128


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (LeaveStatus.REJECTED, LeaveStatus.CANCELLED)


# Requests in these states no longer reserve their dates.
INACTIVE_STATUSES = (LeaveStatus.CANCELLED, LeaveStatus.REJECTED)


@dataclass
class EmployeeBalance:
    id: int
    annual_leave_balance: int


@dataclass
class LeaveRequestRecord:
    employee_id: int
    start_date: date
    end_date: date
    leave_type: str = DEFAULT_LEAVE_TYPE
    reason: str = ""
    status: LeaveStatus = LeaveStatus.PENDING
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def day_count(self) -> int:
        return day_count(self.start_date, self.end_date)

    def overlaps(self, start: date, end: date) -> bool:
        return ranges_overlap(self.start_date, self.end_date, start, end)


def day_count(start: date, end: date) -> int:
    """Inclusive number of calendar days from ``start`` to ``end``."""
    return (end - start).days + 1


def ranges_overlap(s1: date, e1: date, s2: date, e2: date) -> bool:
    return s1 <= e2 and s2 <= e1
