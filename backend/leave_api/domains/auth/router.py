from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator
from sqlalchemy import func
from sqlalchemy.orm import Session

from leave_api.core.errors import LeaveError, ValidationError
from leave_api.core.logging import get_logger
from leave_api.core.responses import success_response
from leave_api.core.security import issue_token, verify_password
from leave_api.db.session import get_session
from leave_api.models.user import User

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)

ERROR_NO_EMAIL_PROVIDED = "No email provided"
ERROR_NO_PASSWORD_PROVIDED = "No password provided"
ERROR_INVALID_CREDENTIALS = "Invalid credentials"


class AuthenticationError(LeaveError):
    status_code = status.HTTP_401_UNAUTHORIZED


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip()


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    userID: int
    email: str
    role: str


@router.post("/login", status_code=status.HTTP_202_ACCEPTED)
def login(payload: LoginRequest, db: Session = Depends(get_session)) -> JSONResponse:
    if not payload.email:
        raise ValidationError(ERROR_NO_EMAIL_PROVIDED)
    if not payload.password.strip():
        raise ValidationError(ERROR_NO_PASSWORD_PROVIDED)

    logger.info("login_attempt", email=payload.email)
    user = (
        db.query(User)
        .filter(func.lower(User.email) == payload.email.lower())
        .one_or_none()
    )

    if not user or not verify_password(payload.password, user.hashed_password, user.salt):
        logger.warning("login_failed", email=payload.email)
        raise AuthenticationError(ERROR_INVALID_CREDENTIALS)

    logger.info("login_success", email=user.email, role=user.role.name)
    return success_response(
        LoginResponse(access_token=issue_token(), userID=user.id, email=user.email, role=user.role.name),
        status_code=status.HTTP_202_ACCEPTED,
    )
