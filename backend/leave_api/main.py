from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from leave_api.api.routes import health
from leave_api.core.config import settings
from leave_api.core.logging import bind_request_context, configure_logging, get_logger
from leave_api.core.monitoring import configure_error_monitoring
from leave_api.core.observability import configure_observability
from leave_api.core.responses import register_exception_handlers
from leave_api.domains.auth.router import router as auth_router
from leave_api.domains.leave_requests.router import router as leave_requests_router
from leave_api.domains.managers.router import router as managers_router
from leave_api.domains.roles.router import router as roles_router
from leave_api.domains.users.router import router as users_router

configure_logging(settings.log_level)
configure_observability()
configure_error_monitoring()
logger = get_logger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.cors_origins] or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    bind_request_context(request.method, request.url.path)
    response = await call_next(request)
    logger.info("request_completed", status=response.status_code)
    return response


app.include_router(health.router)
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(users_router, prefix=settings.api_prefix)
app.include_router(roles_router, prefix=settings.api_prefix)
app.include_router(managers_router, prefix=settings.api_prefix)
app.include_router(leave_requests_router, prefix=settings.api_prefix)


@app.on_event("startup")
def startup_event() -> None:
    logger.info("startup_complete", env=settings.env, api_prefix=settings.api_prefix)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Leave Management API running", "environment": settings.env}
