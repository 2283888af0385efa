from __future__ import annotations

import threading
import time
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from leave_api.core.errors import ConflictError, ValidationError
from leave_api.core.security import generate_salt, hash_password
from leave_api.db.session import Base, configure_sqlite
from leave_api.domains.leave_requests.service import LeaveRequestService
from leave_api.domains.leave_requests.stores import (
    SqlLeaveRequestStore,
    SqlTransactionScope,
    SqlUserStore,
)
from leave_api.models import LeaveRequest, User
from leave_api.seed.seed_data import seed_roles


@pytest.fixture
def file_sessions(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'leave.db'}",
        connect_args={"check_same_thread": False},
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def employee_id(file_sessions) -> int:
    with file_sessions() as session:
        roles = seed_roles(session)
        salt = generate_salt()
        user = User(
            email="employee@example.com",
            firstname="Ada",
            surname="Lovelace",
            hashed_password=hash_password("correct-horse-battery", salt),
            salt=salt,
            role_id=roles["Employee"].id,
            annual_leave_balance=10,
        )
        session.add(user)
        session.commit()
        return user.id


def _service(session) -> LeaveRequestService:
    return LeaveRequestService(SqlUserStore(session), SqlLeaveRequestStore(session), SqlTransactionScope(session))


def _run_in_own_sessions(file_sessions, *calls):
    barrier = threading.Barrier(len(calls))
    outcomes = [None] * len(calls)

    def runner(index, call):
        with file_sessions() as session:
            service = _service(session)
            barrier.wait()
            try:
                outcomes[index] = call(service)
            except Exception as exc:  # collected for assertions
                outcomes[index] = exc

    threads = [threading.Thread(target=runner, args=(i, c)) for i, c in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return outcomes


def _slow_down(monkeypatch, name):
    original = getattr(SqlLeaveRequestStore, name)

    def slowed(self, *args, **kwargs):
        result = original(self, *args, **kwargs)
        time.sleep(0.3)
        return result

    monkeypatch.setattr(SqlLeaveRequestStore, name, slowed)


def test_concurrent_overlapping_submissions_are_serialized(file_sessions, employee_id, monkeypatch):
    _slow_down(monkeypatch, "find_overlapping")

    outcomes = _run_in_own_sessions(
        file_sessions,
        lambda service: service.submit(employee_id, date(2024, 5, 1), date(2024, 5, 3)),
        lambda service: service.submit(employee_id, date(2024, 5, 2), date(2024, 5, 4)),
    )

    assert sum(isinstance(o, ConflictError) for o in outcomes) == 1
    assert sum(not isinstance(o, Exception) for o in outcomes) == 1
    with file_sessions() as session:
        assert session.query(LeaveRequest).count() == 1


def test_concurrent_approvals_never_overdraw(file_sessions, employee_id, monkeypatch):
    with file_sessions() as session:
        service = _service(session)
        first = service.submit(employee_id, date(2024, 6, 1), date(2024, 6, 6))
        second = service.submit(employee_id, date(2024, 7, 1), date(2024, 7, 6))
    _slow_down(monkeypatch, "find_by_id")

    outcomes = _run_in_own_sessions(
        file_sessions,
        lambda service: service.approve(employee_id, first.id),
        lambda service: service.approve(employee_id, second.id),
    )

    assert sum(isinstance(o, ValidationError) for o in outcomes) == 1
    with file_sessions() as session:
        assert session.get(User, employee_id).annual_leave_balance == 4
