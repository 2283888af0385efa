from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from leave_api.core.errors import ConflictError
from leave_api.core.logging import get_logger
from leave_api.core.responses import register_exception_handlers


def _app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    def boom():
        raise RuntimeError("disk on fire")

    @app.get("/conflict")
    def conflict():
        raise ConflictError("Dates overlap with existing request (ID: 7)")

    return app


def test_unexpected_error_uses_error_envelope():
    with TestClient(_app(), raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["status"] == 500
    assert error["message"] == "Unexpected error occurred"
    assert "disk on fire" not in error["message"]
    assert error["timestamp"]


def test_leave_errors_and_unknown_routes_use_error_envelope():
    with TestClient(_app()) as client:
        conflict = client.get("/conflict")
        missing = client.get("/nowhere")

    assert conflict.status_code == 409
    assert conflict.json()["error"]["message"] == "Dates overlap with existing request (ID: 7)"
    assert missing.status_code == 404
    assert missing.json()["error"]["status"] == 404


def test_module_loggers_log_events(capsys):
    logger = get_logger("leave_api.tests")

    logger.info("leave_request_submitted", employee_id=3)

    assert "leave_request_submitted" in capsys.readouterr().out
