"""Student schemas."""

from datetime import datetime

from pydantic import Field

from app.schemas.common import BaseSchema, PaginatedResponse


class StudentCreate(BaseSchema):
    """Student creation schema."""

    full_name: str = Field(..., min_length=2, max_length=255)
    admission_number: str | None = Field(None, max_length=50)
    class_id: int | None = None


class StudentResponse(BaseSchema):
    """Student response schema."""

    id: int
    full_name: str
    admission_number: str | None
    class_id: int | None
    created_at: datetime
    updated_at: datetime


class StudentFilter(BaseSchema):
    """Student filtering options."""

    class_id: int | None = None
    search: str | None = None


PaginatedStudentResponse = PaginatedResponse[StudentResponse]
