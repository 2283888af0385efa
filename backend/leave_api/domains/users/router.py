from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator
from sqlalchemy import func
from sqlalchemy.orm import Session

from leave_api.core.config import settings
from leave_api.core.errors import NotFoundError, ValidationError
from leave_api.core.logging import get_logger
from leave_api.core.responses import success_response
from leave_api.core.security import generate_salt, hash_password
from leave_api.db.session import get_session
from leave_api.models.role import Role
from leave_api.models.user import User

from .validation import validate_user

router = APIRouter(prefix="/users", tags=["users"])
logger = get_logger(__name__)


class UserCreate(BaseModel):
    email: str
    password: str
    firstname: str
    surname: str
    roleID: int | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip()


class UserUpdate(BaseModel):
    id: int
    email: str
    firstname: str
    surname: str
    roleID: int | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip()


class RoleOut(BaseModel):
    roleID: int
    name: str


class UserOut(BaseModel):
    userID: int
    email: str
    firstname: str
    surname: str
    annualLeaveBalance: int
    roleID: RoleOut
    created_at: datetime


def _sanitize(user: User) -> UserOut:
    return UserOut(
        userID=user.id,
        email=user.email,
        firstname=user.firstname,
        surname=user.surname,
        annualLeaveBalance=user.annual_leave_balance,
        roleID=RoleOut(roleID=user.role.id, name=user.role.name),
        created_at=user.created_at or datetime.utcnow(),
    )


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).one_or_none()
    if not user:
        raise NotFoundError(f"User with ID: {user_id} not found")
    return user


def _find_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(func.lower(User.email) == email.lower()).one_or_none()


def _resolve_role(db: Session, role_id: int) -> Role:
    role = db.query(Role).filter(Role.id == role_id).one_or_none()
    if not role:
        raise ValidationError(f"Role with ID: {role_id} does not exist")
    return role


@router.get("")
def list_users(db: Session = Depends(get_session)) -> JSONResponse:
    users = db.query(User).order_by(User.surname.asc(), User.firstname.asc(), User.id.asc()).all()
    return success_response([_sanitize(user) for user in users])


@router.get("/email/{email_address}")
def get_user_by_email(email_address: str, db: Session = Depends(get_session)) -> JSONResponse:
    if not email_address.strip():
        raise ValidationError("Email is required")
    user = _find_by_email(db, email_address.strip())
    if not user:
        raise NotFoundError(f"{email_address} not found")
    return success_response(_sanitize(user))


@router.get("/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_session)) -> JSONResponse:
    return success_response(_sanitize(_get_user(db, user_id)))


@router.post("", status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_session)) -> JSONResponse:
    violations = validate_user(
        payload.email,
        payload.firstname,
        payload.surname,
        payload.roleID,
        password=payload.password,
        require_password=True,
    )
    if violations:
        raise ValidationError.from_violations(violations)

    if _find_by_email(db, payload.email):
        raise ValidationError("User already exists")

    role = _resolve_role(db, payload.roleID)
    salt = generate_salt()
    user = User(
        email=payload.email,
        firstname=payload.firstname.strip(),
        surname=payload.surname.strip(),
        hashed_password=hash_password(payload.password, salt),
        salt=salt,
        role_id=role.id,
        annual_leave_balance=settings.default_leave_balance,
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("user_created", user_id=user.id, email=user.email, role=role.name)
    return success_response(_sanitize(user), status_code=201)


@router.patch("")
def update_user(payload: UserUpdate, db: Session = Depends(get_session)) -> JSONResponse:
    user = _get_user(db, payload.id)

    violations = validate_user(payload.email, payload.firstname, payload.surname, payload.roleID)
    if violations:
        raise ValidationError.from_violations(violations)

    existing = _find_by_email(db, payload.email)
    if existing and existing.id != user.id:
        raise ValidationError("User already exists")

    role = _resolve_role(db, payload.roleID)
    user.email = payload.email
    user.firstname = payload.firstname.strip()
    user.surname = payload.surname.strip()
    user.role_id = role.id
    db.commit()
    db.refresh(user)

    logger.info("user_updated", user_id=user.id)
    return success_response(_sanitize(user))


@router.delete("/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_session)) -> JSONResponse:
    user = _get_user(db, user_id)
    db.delete(user)
    db.commit()

    logger.info("user_deleted", user_id=user_id)
    return success_response("User Deleted")
