from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from leave_api.core.errors import LeaveError
from leave_api.core.logging import get_logger

logger = get_logger(__name__)


def success_response(data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"data": jsonable_encoder(data)})


def error_response(status_code: int, message: str = "Unexpected error occurred") -> JSONResponse:
    timestamp = datetime.now(timezone.utc).isoformat()
    logger.error("request_failed", message=message, status=status_code, timestamp=timestamp)
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message, "status": status_code, "timestamp": timestamp}},
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(item) for item in err.get("loc", ()) if item not in ("body", "path", "query"))
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return ", ".join(parts) or "Invalid request"


async def leave_error_handler(request: Request, exc: LeaveError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, _describe_validation_errors(exc))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", error=type(exc).__name__)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LeaveError, leave_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
