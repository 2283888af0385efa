"""In-memory stores satisfying the contracts in ``stores``.

Used to exercise ``LeaveRequestService`` without a database. The transaction
scope gives the same guarantees as the SQL one: one operation per employee at
a time, and all of an operation's writes undone when it raises.
"""

from __future__ import annotations

import itertools
import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, Iterator, List, Optional, Sequence

from leave_api.core.errors import NotFoundError

from .entities import EmployeeBalance, LeaveRequestRecord, LeaveStatus


class InMemoryUserStore:
    def __init__(self, balances: Optional[Dict[int, int]] = None) -> None:
        self.users: Dict[int, EmployeeBalance] = {
            user_id: EmployeeBalance(id=user_id, annual_leave_balance=balance)
            for user_id, balance in (balances or {}).items()
        }

    def find_by_id(self, user_id: int) -> Optional[EmployeeBalance]:
        user = self.users.get(user_id)
        return replace(user) if user else None

    def adjust_balance(self, user_id: int, delta_days: int) -> EmployeeBalance:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError(f"User with id: {user_id} not found")
        new_balance = user.annual_leave_balance + delta_days
        if new_balance < 0:
            raise ValueError(f"Balance for user {user_id} cannot go below zero")
        user.annual_leave_balance = new_balance
        return replace(user)


class InMemoryLeaveRequestStore:
    def __init__(self) -> None:
        self.records: Dict[int, LeaveRequestRecord] = {}
        self._ids = itertools.count(1)

    def find_by_id(self, employee_id: int, request_id: int) -> Optional[LeaveRequestRecord]:
        record = self.records.get(request_id)
        if record is None or record.employee_id != employee_id:
            return None
        return replace(record)

    def find_overlapping(
        self,
        employee_id: int,
        start: date,
        end: date,
        exclude_statuses: Sequence[LeaveStatus] = (),
    ) -> List[LeaveRequestRecord]:
        return [
            record
            for record in self.find_all_for_employee(employee_id)
            if record.overlaps(start, end) and record.status not in exclude_statuses
        ]

    def find_all_for_employee(self, employee_id: int) -> List[LeaveRequestRecord]:
        mine = [replace(r) for r in list(self.records.values()) if r.employee_id == employee_id]
        return sorted(mine, key=lambda r: (r.start_date, r.id))

    def save(self, record: LeaveRequestRecord) -> LeaveRequestRecord:
        now = datetime.utcnow()
        if record.id is None or record.id not in self.records:
            stored = replace(record, id=record.id or next(self._ids), created_at=now, updated_at=now)
        else:
            stored = replace(record, updated_at=now)
        self.records[stored.id] = stored
        return replace(stored)


class InMemoryTransactionScope:
    def __init__(self, users: InMemoryUserStore, leave_requests: InMemoryLeaveRequestStore) -> None:
        self.users = users
        self.leave_requests = leave_requests
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.RLock] = defaultdict(threading.RLock)

    def _lock_for(self, employee_id: int) -> threading.RLock:
        with self._guard:
            return self._locks[employee_id]

    @contextmanager
    def for_employee(self, employee_id: int) -> Iterator[None]:
        with self._lock_for(employee_id):
            user_snapshot = self.users.find_by_id(employee_id)
            requests_snapshot = self.leave_requests.find_all_for_employee(employee_id)
            try:
                yield
            except Exception:
                self._restore(employee_id, user_snapshot, requests_snapshot)
                raise

    def _restore(
        self,
        employee_id: int,
        user_snapshot: Optional[EmployeeBalance],
        requests_snapshot: List[LeaveRequestRecord],
    ) -> None:
        if user_snapshot is None:
            self.users.users.pop(employee_id, None)
        else:
            self.users.users[employee_id] = user_snapshot
        records = self.leave_requests.records
        for request_id in [rid for rid, r in list(records.items()) if r.employee_id == employee_id]:
            del records[request_id]
        for record in requests_snapshot:
            records[record.id] = record
