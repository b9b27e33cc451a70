"""Student management endpoints."""

from fastapi import APIRouter, Query

from app.core.database import DbSession
from app.schemas.student import (
    PaginatedStudentResponse,
    StudentCreate,
    StudentFilter,
    StudentResponse,
)
from app.services.student import StudentService

router = APIRouter()


@router.post("", response_model=StudentResponse)
def create_student(request: StudentCreate, db: DbSession):
    """Create a new student."""
    service = StudentService(db)
    return service.create_student(request)


@router.get("", response_model=PaginatedStudentResponse)
def list_students(
    db: DbSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    class_id: int | None = None,
    search: str | None = None,
):
    """List students with filtering and pagination."""
    service = StudentService(db)
    filters = StudentFilter(class_id=class_id, search=search)
    return service.list_students(filters=filters, page=page, page_size=page_size)
