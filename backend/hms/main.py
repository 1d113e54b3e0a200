"""
Hospital Management Backend - REST API
Rooms, medicines, patients, staff and clinical records behind bearer-token auth.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import (
    admissions, appointments, auth, doctors, medicine_issues, medicines,
    patient_history, patients, room_assignments, rooms, staff, users,
)
from .core.config import settings
from .core.errors import HMSError, Unauthenticated
from .core.request_logging import RequestLoggingMiddleware, configure_logging
from .models import base as db_base

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    db_base.init_db()
    logger.info("%s %s started", settings.APP_NAME, settings.VERSION)
    yield
    db_base.shutdown_db()


app = FastAPI(
    title="Hospital Management API",
    description=(
        "Hospital management backend: patients, doctors, staff, appointments, "
        "room occupancy and medicine stock with role-gated bearer-token auth."
    ),
    version=settings.VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

for module in (
    auth, users, patients, doctors, staff, appointments, patient_history,
    rooms, room_assignments, medicines, medicine_issues, admissions,
):
    app.include_router(module.router, prefix=settings.API_PREFIX)


# ── Error translation ───────────────────────────────────────────────────────

def _error(status_code: int, message, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


@app.exception_handler(HMSError)
async def handle_domain_error(request: Request, exc: HMSError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return _error(exc.status_code, exc.message, headers)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, exc.detail, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return _error(400, "Invalid request")
    first = errors[0]
    location = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    message = f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid request")
    return _error(400, message)


@app.exception_handler(IntegrityError)
async def handle_integrity_error(request: Request, exc: IntegrityError):
    logger.info("Integrity violation on %s %s: %s", request.method, request.url.path, exc.orig)
    return _error(409, "Conflicts with existing data")


@app.exception_handler(PoolTimeoutError)
@app.exception_handler(OperationalError)
async def handle_unavailable(request: Request, exc: SQLAlchemyError):
    logger.warning("Datastore unavailable on %s %s: %s", request.method, request.url.path, exc)
    return _error(503, "Service temporarily unavailable")


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")


# ── Liveness ─────────────────────────────────────────────────────────────────

@app.get("/")
def root():
    return {"status": "ok", "service": settings.APP_NAME, "version": settings.VERSION}


@app.get("/health")
def health_check():
    try:
        db_base.check_connection()
    except SQLAlchemyError:
        logger.warning("Health check: datastore unreachable")
        return JSONResponse(status_code=503, content={"status": "unavailable", "database": "down"})
    return {"status": "healthy", "service": settings.APP_NAME, "database": "up"}


def run() -> None:
    """Console entry point: serve the API with uvicorn on HOST:PORT."""
    import uvicorn

    uvicorn.run("hms.main:app", host=settings.HOST, port=settings.PORT)
