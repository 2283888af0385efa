"""Persistence contracts consumed by the leave request service, and their SQLAlchemy implementation.

The service only ever talks to the three protocols below. ``SqlUserStore``,
``SqlLeaveRequestStore`` and ``SqlTransactionScope`` share one ``Session`` so
that everything an operation writes is committed (or rolled back) together.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import ContextManager, Iterator, List, Optional, Protocol, Sequence

from sqlalchemy.orm import Session

from leave_api.core.errors import NotFoundError
from leave_api.models.leave_request import LeaveRequest
from leave_api.models.user import User

from .entities import EmployeeBalance, LeaveRequestRecord, LeaveStatus


class UserStore(Protocol):
    def find_by_id(self, user_id: int) -> Optional[EmployeeBalance]: ...

    def adjust_balance(self, user_id: int, delta_days: int) -> EmployeeBalance: ...


class LeaveRequestStore(Protocol):
    def find_by_id(self, employee_id: int, request_id: int) -> Optional[LeaveRequestRecord]: ...

    def find_overlapping(
        self,
        employee_id: int,
        start: date,
        end: date,
        exclude_statuses: Sequence[LeaveStatus],
    ) -> List[LeaveRequestRecord]: ...

    def find_all_for_employee(self, employee_id: int) -> List[LeaveRequestRecord]: ...

    def save(self, record: LeaveRequestRecord) -> LeaveRequestRecord: ...


class TransactionScope(Protocol):
    def for_employee(self, employee_id: int) -> ContextManager[None]: ...


def _to_balance(user: User) -> EmployeeBalance:
    return EmployeeBalance(id=user.id, annual_leave_balance=int(user.annual_leave_balance or 0))


def _to_record(row: LeaveRequest) -> LeaveRequestRecord:
    return LeaveRequestRecord(
        id=row.id,
        employee_id=row.employee_id,
        start_date=row.start_date,
        end_date=row.end_date,
        leave_type=row.leave_type,
        reason=row.reason or "",
        status=LeaveStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlUserStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_id(self, user_id: int) -> Optional[EmployeeBalance]:
        user = self.session.query(User).filter(User.id == user_id).one_or_none()
        return _to_balance(user) if user else None

    def adjust_balance(self, user_id: int, delta_days: int) -> EmployeeBalance:
        user = (
            self.session.query(User)
            .filter(User.id == user_id)
            .with_for_update()
            .one_or_none()
        )
        if user is None:
            raise NotFoundError(f"User with id: {user_id} not found")

        new_balance = int(user.annual_leave_balance or 0) + delta_days
        if new_balance < 0:
            raise ValueError(
                f"Balance for user {user_id} cannot go below zero "
                f"({user.annual_leave_balance} {delta_days:+d})"
            )
        user.annual_leave_balance = new_balance
        self.session.flush()
        return _to_balance(user)


class SqlLeaveRequestStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_id(self, employee_id: int, request_id: int) -> Optional[LeaveRequestRecord]:
        row = self._get_row(employee_id, request_id)
        return _to_record(row) if row else None

    def find_overlapping(
        self,
        employee_id: int,
        start: date,
        end: date,
        exclude_statuses: Sequence[LeaveStatus] = (),
    ) -> List[LeaveRequestRecord]:
        query = self.session.query(LeaveRequest).filter(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.start_date <= end,
            LeaveRequest.end_date >= start,
        )
        if exclude_statuses:
            query = query.filter(LeaveRequest.status.notin_([s.value for s in exclude_statuses]))
        rows = query.order_by(LeaveRequest.start_date.asc(), LeaveRequest.id.asc()).all()
        return [_to_record(row) for row in rows]

    def find_all_for_employee(self, employee_id: int) -> List[LeaveRequestRecord]:
        rows = (
            self.session.query(LeaveRequest)
            .filter(LeaveRequest.employee_id == employee_id)
            .order_by(LeaveRequest.start_date.asc(), LeaveRequest.id.asc())
            .all()
        )
        return [_to_record(row) for row in rows]

    def save(self, record: LeaveRequestRecord) -> LeaveRequestRecord:
        row = self._get_row(record.employee_id, record.id) if record.id is not None else None
        if row is None:
            row = LeaveRequest(employee_id=record.employee_id)
            self.session.add(row)

        row.start_date = record.start_date
        row.end_date = record.end_date
        row.leave_type = record.leave_type
        row.reason = record.reason
        row.status = LeaveStatus(record.status).value
        self.session.flush()
        self.session.refresh(row)
        return _to_record(row)

    def _get_row(self, employee_id: int, request_id: int) -> Optional[LeaveRequest]:
        return (
            self.session.query(LeaveRequest)
            .filter(LeaveRequest.id == request_id, LeaveRequest.employee_id == employee_id)
            .one_or_none()
        )


class SqlTransactionScope:
    """One database transaction per operation, holding a row lock on the employee."""

    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def for_employee(self, employee_id: int) -> Iterator[None]:
        try:
            # SELECT ... FOR UPDATE serializes concurrent operations on this employee
            # until commit/rollback. SQLite ignores the clause; there the BEGIN IMMEDIATE
            # issued by db.session.configure_sqlite holds the database lock instead.
            self.session.query(User.id).filter(User.id == employee_id).with_for_update().one_or_none()
            yield
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
