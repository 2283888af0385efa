from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from leave_api.core.errors import NotFoundError
from leave_api.core.responses import success_response
from leave_api.db.session import get_session
from leave_api.models.role import Role

router = APIRouter(prefix="/roles", tags=["roles"])


class RoleOut(BaseModel):
    roleID: int
    name: str


@router.get("")
def list_roles(db: Session = Depends(get_session)) -> JSONResponse:
    rows = db.query(Role).order_by(Role.id.asc()).all()
    return success_response([RoleOut(roleID=r.id, name=r.name) for r in rows])


@router.get("/{role_id}")
def get_role(role_id: int, db: Session = Depends(get_session)) -> JSONResponse:
    role = db.query(Role).filter(Role.id == role_id).one_or_none()
    if not role:
        raise NotFoundError(f"Role not found with id {role_id}")
    return success_response(RoleOut(roleID=role.id, name=role.name))
