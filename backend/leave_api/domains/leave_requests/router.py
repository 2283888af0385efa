from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from leave_api.core.responses import success_response
from leave_api.db.session import get_session

from .entities import DEFAULT_LEAVE_TYPE, LeaveRequestRecord
from .service import LeaveRequestService
from .stores import SqlLeaveRequestStore, SqlTransactionScope, SqlUserStore

router = APIRouter(prefix="/leave-requests", tags=["leave-requests"])


class LeaveRequestCreate(BaseModel):
    userID: int = Field(..., gt=0)
    startDate: date
    endDate: date
    leaveType: str = DEFAULT_LEAVE_TYPE
    reason: str = ""


class LeaveRequestRef(BaseModel):
    userID: int = Field(..., gt=0)
    leaveRequestID: int = Field(..., gt=0)


class LeaveRequestApprove(LeaveRequestRef):
    reason: str | None = None


class LeaveRequestReject(LeaveRequestRef):
    reason: str | None = None


class LeaveRequestOut(BaseModel):
    leaveRequestID: int
    userID: int
    leaveType: str
    startDate: date
    endDate: date
    status: str
    reason: str
    createdAt: datetime | None = None
    updatedAt: datetime | None = None


class LeaveStatusOut(BaseModel):
    leaveRequestID: int
    startDate: date
    endDate: date
    status: str
    reason: str


class LeaveBalanceOut(BaseModel):
    leaveBalance: int


def get_leave_request_service(db: Session = Depends(get_session)) -> LeaveRequestService:
    return LeaveRequestService(
        users=SqlUserStore(db),
        leave_requests=SqlLeaveRequestStore(db),
        transactions=SqlTransactionScope(db),
    )


def _serialize(record: LeaveRequestRecord) -> LeaveRequestOut:
    return LeaveRequestOut(
        leaveRequestID=record.id,
        userID=record.employee_id,
        leaveType=record.leave_type,
        startDate=record.start_date,
        endDate=record.end_date,
        status=record.status.value,
        reason=record.reason,
        createdAt=record.created_at,
        updatedAt=record.updated_at,
    )


@router.post("", status_code=201)
def submit_leave(
    payload: LeaveRequestCreate,
    service: LeaveRequestService = Depends(get_leave_request_service),
) -> JSONResponse:
    record = service.submit(
        payload.userID,
        payload.startDate,
        payload.endDate,
        leave_type=payload.leaveType,
        reason=payload.reason,
    )
    return success_response(_serialize(record), status_code=201)


@router.delete("")
def cancel_leave(
    payload: LeaveRequestRef,
    service: LeaveRequestService = Depends(get_leave_request_service),
) -> JSONResponse:
    record = service.cancel(payload.userID, payload.leaveRequestID)
    return success_response(_serialize(record))


@router.patch("/approve")
def approve_leave(
    payload: LeaveRequestApprove,
    service: LeaveRequestService = Depends(get_leave_request_service),
) -> JSONResponse:
    record = service.approve(payload.userID, payload.leaveRequestID, reason=payload.reason)
    return success_response(_serialize(record))


@router.patch("/reject")
def reject_leave(
    payload: LeaveRequestReject,
    service: LeaveRequestService = Depends(get_leave_request_service),
) -> JSONResponse:
    record = service.reject(payload.userID, payload.leaveRequestID, payload.reason)
    return success_response(_serialize(record))


@router.get("/status/{user_id}")
def leave_status(
    user_id: int,
    service: LeaveRequestService = Depends(get_leave_request_service),
) -> JSONResponse:
    records = service.get_status(user_id)
    return success_response(
        [
            LeaveStatusOut(
                leaveRequestID=r.id,
                startDate=r.start_date,
                endDate=r.end_date,
                status=r.status.value,
                reason=r.reason,
            )
            for r in records
        ]
    )


@router.get("/remaining/{user_id}")
def leave_remaining(
    user_id: int,
    service: LeaveRequestService = Depends(get_leave_request_service),
) -> JSONResponse:
    return success_response(LeaveBalanceOut(leaveBalance=service.get_balance(user_id)))
