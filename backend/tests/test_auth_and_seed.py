from __future__ import annotations

from leave_api.core.config import Settings
from leave_api.core.security import verify_password
from leave_api.models import Role, User
from leave_api.seed.seed_data import seed_database

PASSWORD = "correct-horse-battery"


def test_login_returns_token_and_role(client, make_user):
    make_user(email="manager@example.com", role="Manager")

    response = client.post(
        "/api/auth/login",
        json={"email": " Manager@Example.com ", "password": PASSWORD},
    )

    assert response.status_code == 202
    data = response.json()["data"]
    assert data["access_token"]
    assert data["token_type"] == "bearer"
    assert data["role"] == "Manager"
    assert data["email"] == "manager@example.com"


def test_login_wrong_password(client, make_user):
    make_user(email="employee@example.com")

    response = client.post("/api/auth/login", json={"email": "employee@example.com", "password": "nope-nope-nope"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid credentials"


def test_login_requires_email_and_password(client):
    assert client.post("/api/auth/login", json={"password": "x"}).json()["error"]["message"] == "No email provided"
    assert (
        client.post("/api/auth/login", json={"email": "a@b.co", "password": " "}).json()["error"]["message"]
        == "No password provided"
    )


def test_seed_creates_roles_and_admin_once(db_session):
    config = Settings(admin_default_email="admin@example.com", admin_default_password="admin-password-123")

    admin = seed_database(db_session, config)
    again = seed_database(db_session, config)

    assert admin.id == again.id
    assert sorted(r.name for r in db_session.query(Role).all()) == ["Admin", "Employee", "Manager"]
    stored = db_session.query(User).one()
    assert stored.role.name == "Admin"
    assert verify_password("admin-password-123", stored.hashed_password, stored.salt)


def test_seed_without_admin_credentials_only_creates_roles(db_session):
    assert seed_database(db_session, Settings(admin_default_email=None, admin_default_password=None)) is None
    assert db_session.query(Role).count() == 3
    assert db_session.query(User).count() == 0


def test_health_endpoints(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/health/ready").json()["database"] == "reachable"
