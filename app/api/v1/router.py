"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from app.api.v1.endpoints import classes, exams, results, students, subjects
from app.schemas.common import ErrorResponse

# Every AppException renders as ErrorResponse
api_router = APIRouter(
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)

# Catalog
api_router.include_router(
    classes.router,
    prefix="/classes",
    tags=["Classes"],
)

api_router.include_router(
    subjects.router,
    prefix="/subjects",
    tags=["Subjects"],
)

# Students
api_router.include_router(
    students.router,
    prefix="/students",
    tags=["Students"],
)

# Exams
api_router.include_router(
    exams.router,
    prefix="/exams",
    tags=["Exams"],
)

# Results
api_router.include_router(
    results.router,
    prefix="/results",
    tags=["Results"],
)
