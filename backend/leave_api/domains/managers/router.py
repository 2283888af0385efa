from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from leave_api.core.errors import ConflictError, NotFoundError, ValidationError
from leave_api.core.logging import get_logger
from leave_api.core.responses import success_response
from leave_api.db.session import get_session
from leave_api.models.manager import Manager
from leave_api.models.user import User

router = APIRouter(prefix="/managers", tags=["managers"])
logger = get_logger(__name__)


class ManagerPairIn(BaseModel):
    userID: int = Field(..., gt=0)
    managerID: int = Field(..., gt=0)


class ManagerUserOut(BaseModel):
    userID: int
    firstname: str
    surname: str
    email: str
    annualLeaveBalance: int


class ManagerPairOut(BaseModel):
    id: int
    userID: int
    managerID: ManagerUserOut


def _serialize(pair: Manager) -> ManagerPairOut:
    manager = pair.manager
    return ManagerPairOut(
        id=pair.id,
        userID=pair.user_id,
        managerID=ManagerUserOut(
            userID=manager.id,
            firstname=manager.firstname,
            surname=manager.surname,
            email=manager.email,
            annualLeaveBalance=manager.annual_leave_balance,
        ),
    )


def _require_user(db: Session, user_id: int, label: str) -> User:
    user = db.query(User).filter(User.id == user_id).one_or_none()
    if not user:
        raise NotFoundError(f"{label} with ID: {user_id} not found")
    return user


@router.get("")
def list_pairs(db: Session = Depends(get_session)) -> JSONResponse:
    pairs = db.query(Manager).order_by(Manager.id.asc()).all()
    return success_response([_serialize(p) for p in pairs])


@router.get("/{user_id}")
def get_pair_for_user(user_id: int, db: Session = Depends(get_session)) -> JSONResponse:
    pair = db.query(Manager).filter(Manager.user_id == user_id).one_or_none()
    if not pair:
        raise NotFoundError(f"Manager for user ID: {user_id} not found")
    return success_response(_serialize(pair))


@router.post("", status_code=201)
def create_pair(payload: ManagerPairIn, db: Session = Depends(get_session)) -> JSONResponse:
    if payload.userID == payload.managerID:
        raise ValidationError("A user cannot be their own manager")
    _require_user(db, payload.userID, "User")
    _require_user(db, payload.managerID, "Manager")

    if db.query(Manager).filter(Manager.user_id == payload.userID).one_or_none():
        raise ConflictError(f"User ID: {payload.userID} already has a manager")

    pair = Manager(user_id=payload.userID, manager_id=payload.managerID)
    db.add(pair)
    db.commit()
    db.refresh(pair)

    logger.info("manager_assigned", user_id=payload.userID, manager_id=payload.managerID)
    return success_response(_serialize(pair), status_code=201)


@router.patch("")
def update_manager(payload: ManagerPairIn, db: Session = Depends(get_session)) -> JSONResponse:
    pair = db.query(Manager).filter(Manager.user_id == payload.userID).one_or_none()
    if not pair:
        raise NotFoundError("Manager could not be found for user.")
    if payload.userID == payload.managerID:
        raise ValidationError("A user cannot be their own manager")
    _require_user(db, payload.managerID, "Manager")

    pair.manager_id = payload.managerID
    db.commit()
    db.refresh(pair)

    logger.info("manager_reassigned", user_id=payload.userID, manager_id=payload.managerID)
    return success_response(_serialize(pair))


@router.delete("/{pair_id}")
def delete_pair(pair_id: int, db: Session = Depends(get_session)) -> JSONResponse:
    pair = db.query(Manager).filter(Manager.id == pair_id).one_or_none()
    if not pair:
        raise NotFoundError("Manager pair with the provided ID not found")
    db.delete(pair)
    db.commit()

    logger.info("manager_pair_deleted", pair_id=pair_id)
    return success_response("Manager Pair Deleted")
