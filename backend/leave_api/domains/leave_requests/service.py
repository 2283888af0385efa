"""Leave request lifecycle and balance accounting.

Rules:
  - Day count is inclusive: ``(end - start).days + 1``.
  - Submitting never touches the balance; it only has to fit in it.
  - Approving debits the day count, cancelling an approved request credits it back.
  - Pending and approved requests of one employee may not overlap.
  - Every operation runs inside ``TransactionScope.for_employee`` so the status
    change and the balance change commit together, one operation per employee
    at a time.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from leave_api.core.errors import (
    BalanceUpdateError,
    ConflictError,
    FieldViolation,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from leave_api.core.logging import get_logger
from leave_api.core.observability import record_balance_adjustment, record_transition, tracer

from .entities import (
    DEFAULT_LEAVE_TYPE,
    INACTIVE_STATUSES,
    EmployeeBalance,
    LeaveRequestRecord,
    LeaveStatus,
    day_count,
)
from .stores import LeaveRequestStore, TransactionScope, UserStore
from .validation import DateInput, ensure_valid, parse_date

logger = get_logger(__name__)


class LeaveRequestService:
    def __init__(
        self,
        users: UserStore,
        leave_requests: LeaveRequestStore,
        transactions: TransactionScope,
    ) -> None:
        self.users = users
        self.leave_requests = leave_requests
        self.transactions = transactions

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_employee(self, employee_id: int) -> EmployeeBalance:
        employee = self.users.find_by_id(employee_id)
        if employee is None:
            raise NotFoundError(f"User with id: {employee_id} not found")
        return employee

    def _get_request(self, employee_id: int, leave_request_id: int) -> LeaveRequestRecord:
        record = self.leave_requests.find_by_id(employee_id, leave_request_id)
        if record is None:
            raise NotFoundError(
                f"Leave request with ID: {leave_request_id} could not be found for user with ID: {employee_id}"
            )
        return record

    @staticmethod
    def _ensure_fits_balance(days: int, employee: EmployeeBalance) -> None:
        if days > employee.annual_leave_balance:
            raise ValidationError(
                f"Leave length ({days}) exceeds employee balance ({employee.annual_leave_balance})",
                [FieldViolation("end_date", "Leave length exceeds remaining balance")],
            )

    @staticmethod
    def _ensure_pending(record: LeaveRequestRecord, action: str) -> None:
        if record.status != LeaveStatus.PENDING:
            raise InvalidStateError(
                f"Leave request has status: {record.status.value}. Cannot be {action}.",
                current_status=record.status.value,
            )

    def _adjust_balance(self, employee_id: int, delta_days: int) -> EmployeeBalance:
        try:
            employee = self.users.adjust_balance(employee_id, delta_days)
        except Exception as exc:
            raise BalanceUpdateError(
                f"Unexpected error when changing balance for user: {employee_id} by {delta_days}"
            ) from exc
        record_balance_adjustment(delta_days)
        return employee

    def _save_transition(self, record: LeaveRequestRecord) -> LeaveRequestRecord:
        ensure_valid(record)
        saved = self.leave_requests.save(record)
        record_transition(saved.status.value)
        return saved

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def submit(
        self,
        employee_id: int,
        start_date: DateInput,
        end_date: DateInput,
        leave_type: Optional[str] = DEFAULT_LEAVE_TYPE,
        reason: Optional[str] = "",
    ) -> LeaveRequestRecord:
        start = parse_date(start_date, "start_date")
        end = parse_date(end_date, "end_date")
        record = LeaveRequestRecord(
            employee_id=employee_id,
            start_date=start,
            end_date=end,
            leave_type=DEFAULT_LEAVE_TYPE if leave_type is None else leave_type,
            reason="" if reason is None else reason,
            status=LeaveStatus.PENDING,
        )
        ensure_valid(record)
        if start > end:
            raise ValidationError(
                f"End date: {end.isoformat()} is before Start date: {start.isoformat()}",
                [FieldViolation("end_date", "End date must not be before start date")],
            )

        with tracer.start_as_current_span("leave_request.submit"), self.transactions.for_employee(employee_id):
            employee = self._get_employee(employee_id)
            days = day_count(start, end)
            self._ensure_fits_balance(days, employee)

            clashes = self.leave_requests.find_overlapping(employee_id, start, end, INACTIVE_STATUSES)
            if clashes:
                raise ConflictError(f"Dates overlap with existing request (ID: {clashes[0].id})")

            saved = self._save_transition(record)

        logger.info(
            "leave_request_submitted",
            employee_id=employee_id,
            leave_request_id=saved.id,
            start_date=start.isoformat(),
            end_date=end.isoformat(),
            days=days,
        )
        return saved

    def cancel(self, employee_id: int, leave_request_id: int) -> LeaveRequestRecord:
        with tracer.start_as_current_span("leave_request.cancel"), self.transactions.for_employee(employee_id):
            record = self._get_request(employee_id, leave_request_id)
            if record.status.is_terminal:
                raise InvalidStateError(
                    f"Leave request has status: {record.status.value}. Cannot be cancelled.",
                    current_status=record.status.value,
                )
            was_approved = record.status == LeaveStatus.APPROVED

            saved = self._save_transition(replace(record, status=LeaveStatus.CANCELLED))
            if was_approved:
                self._adjust_balance(employee_id, saved.day_count)

        logger.info(
            "leave_request_cancelled",
            employee_id=employee_id,
            leave_request_id=leave_request_id,
            credited_days=saved.day_count if was_approved else 0,
        )
        return saved

    def approve(
        self,
        employee_id: int,
        leave_request_id: int,
        reason: Optional[str] = None,
    ) -> LeaveRequestRecord:
        with tracer.start_as_current_span("leave_request.approve"), self.transactions.for_employee(employee_id):
            record = self._get_request(employee_id, leave_request_id)
            self._ensure_pending(record, "approved")

            employee = self._get_employee(employee_id)
            days = record.day_count
            self._ensure_fits_balance(days, employee)

            saved = self._save_transition(replace(record, status=LeaveStatus.APPROVED, reason=reason or ""))
            self._adjust_balance(employee_id, -days)

        logger.info(
            "leave_request_approved",
            employee_id=employee_id,
            leave_request_id=leave_request_id,
            debited_days=days,
        )
        return saved

    def reject(self, employee_id: int, leave_request_id: int, reason: Optional[str]) -> LeaveRequestRecord:
        if not reason or not reason.strip():
            raise ValidationError("Reason must be provided.", [FieldViolation("reason", "Reason must be provided.")])

        with tracer.start_as_current_span("leave_request.reject"), self.transactions.for_employee(employee_id):
            record = self._get_request(employee_id, leave_request_id)
            self._ensure_pending(record, "rejected")
            saved = self._save_transition(replace(record, status=LeaveStatus.REJECTED, reason=reason))

        logger.info("leave_request_rejected", employee_id=employee_id, leave_request_id=leave_request_id)
        return saved

    def get_status(self, employee_id: int) -> List[LeaveRequestRecord]:
        records = self.leave_requests.find_all_for_employee(employee_id)
        if not records:
            raise NotFoundError(f"No leave requests found for user ID: {employee_id}")
        return records

    def get_balance(self, employee_id: int) -> int:
        return self._get_employee(employee_id).annual_leave_balance
