"""JobDesk - job application and moderation service."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from jobdesk.core.config import settings
from jobdesk.core.exceptions import ApplicationError, InternalError
from jobdesk.core.redis_client import OtpStore, close_redis, get_redis
from jobdesk.core.storage import init_models
from jobdesk.routers import auth_router, jobs_router, session_router
from jobdesk.services.account_service import AccountService

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Initializing application...")
    await init_models()
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    if settings.admin_email and settings.admin_password:
        service = AccountService(OtpStore(await get_redis()))
        await service.ensure_admin(settings.admin_email, settings.admin_password)

    logger.info("Application initialized")

    yield

    logger.info("Shutting down...")
    await close_redis()
    logger.info("Shutdown complete")


app = FastAPI(
    title="JobDesk",
    description="Job applications with resume upload and moderation",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _envelope(status_code: int, message: str, headers: dict | None = None):
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


@app.exception_handler(ApplicationError)
async def application_error_handler(request: Request, exc: ApplicationError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _envelope(exc.status_code, exc.message, getattr(exc, "headers", None))


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return _envelope(exc.status_code, str(exc.detail), exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    fields = [".".join(str(p) for p in e.get("loc", ())[1:]) for e in errors]
    message = "Invalid request"
    if fields and any(fields):
        message = f"Invalid request: {', '.join(f for f in fields if f)}"
    return _envelope(400, message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    error = InternalError()
    return _envelope(error.status_code, error.message)


app.include_router(auth_router)
app.include_router(session_router)
app.include_router(jobs_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "jobdesk"}
