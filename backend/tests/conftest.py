from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leave_api.core.security import generate_salt, hash_password
from leave_api.db.session import Base, configure_sqlite, get_session
from leave_api.domains.leave_requests.memory import (
    InMemoryLeaveRequestStore,
    InMemoryTransactionScope,
    InMemoryUserStore,
)
from leave_api.domains.leave_requests.service import LeaveRequestService
from leave_api.main import app
from leave_api.models import User
from leave_api.seed.seed_data import seed_roles

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
configure_sqlite(engine, immediate_transactions=False)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "correct-horse-battery"


def override_get_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_session] = override_get_session


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def roles(db_session) -> dict[str, int]:
    created = seed_roles(db_session)
    db_session.commit()
    return {name: role.id for name, role in created.items()}


@pytest.fixture
def make_user(db_session, roles):
    def _make(
        email: str = "employee@example.com",
        balance: int = 25,
        role: str = "Employee",
        password: str = DEFAULT_PASSWORD,
        firstname: str = "Ada",
        surname: str = "Lovelace",
    ) -> int:
        salt = generate_salt()
        user = User(
            email=email,
            firstname=firstname,
            surname=surname,
            hashed_password=hash_password(password, salt),
            salt=salt,
            role_id=roles[role],
            annual_leave_balance=balance,
        )
        db_session.add(user)
        db_session.commit()
        return user.id

    return _make


@pytest.fixture
def memory_stores():
    users = InMemoryUserStore({1: 10, 2: 3})
    leave_requests = InMemoryLeaveRequestStore()
    scope = InMemoryTransactionScope(users, leave_requests)
    return users, leave_requests, scope


@pytest.fixture
def service(memory_stores) -> LeaveRequestService:
    users, leave_requests, scope = memory_stores
    return LeaveRequestService(users, leave_requests, scope)
