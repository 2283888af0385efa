from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from leave_api.db.session import get_session

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", summary="Liveness probe")
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ready", summary="Readiness probe")
def readiness(db: Session = Depends(get_session)) -> dict[str, str]:
    db.execute(text("SELECT 1"))
    return {"status": "ok", "database": "reachable"}
