"""Exam portal API application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.database import engine
from app.core.exceptions import AppException, ConflictError
from app.middleware.logging import RequestLoggingMiddleware

logger = logging.getLogger(__name__)

API_DESCRIPTION = """
Exam Portal Backend API - secondary school examination administration.

## Features

- **Exam Lifecycle**: Upcoming / Active / Ended phase of every scheduled exam
- **Grading Progress**: Submission and grading counts per exam and overall
- **Results**: Grades, score display, per-exam analytics and top performers
- **Subject Catalog**: Junior/Senior subject eligibility kept consistent

## Errors

Every error response has the shape
`{"success": false, "error": {"code": ..., "message": ..., "details": {...}}}`.
Time window and mark problems use the codes `INVALID_TIME_WINDOW` and
`INVALID_DATA`.
"""


def setup_logging() -> None:
    """Configure root logging once."""
    level = logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # SQLAlchemy echoes every statement at INFO
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def error_response(status_code: int, code: str, message: str, details: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message, "details": details or {}},
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors with non-serializable context (e.g. ValueError) stringified."""
    return jsonable_encoder(exc.errors(), custom_encoder={Exception: str})


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure in the common error envelope."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        return JSONResponse(status_code=exc.status_code, content=exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(
            422,
            "VALIDATION_ERROR",
            "Request validation failed",
            {"errors": jsonable_errors(exc)},
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        # Unique constraints lost to a concurrent request (e.g. the same student submitting twice)
        logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
        conflict = ConflictError("Conflicts with an existing record")
        return JSONResponse(status_code=conflict.status_code, content=conflict.detail)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return error_response(500, "INTERNAL_ERROR", "An internal server error occurred")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    if settings.STRICT_RESULT_VALIDATION:
        logger.info("Strict result validation enabled")
    yield
    logger.info("Shutting down application")
    engine.dispose()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=API_DESCRIPTION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Liveness probe."""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
